"""Utility functions for parsing buffer capacity settings."""


def _validate_has_colon(text: str) -> None:
    """Validate that text contains a colon separator.

    Precondition:
        text is a non-None string

    Postcondition:
        raises ValueError if ':' not in text, otherwise returns None

    Args:
        text: string to validate

    Raises:
        ValueError: if text does not contain a colon
    """
    if ":" not in text:
        raise ValueError(f"Invalid format: '{text}'. Expected 'stream.Product:Capacity'")


def _split_target_capacity_string(text: str) -> tuple[str, str]:
    """Split text on its last colon and trim whitespace from both parts.

    Precondition:
        text contains at least one colon character

    Postcondition:
        returns (target, capacity_string) where both are stripped of whitespace

    Args:
        text: string in format "stream.Product:Capacity"

    Returns:
        tuple of (target, capacity_string) with whitespace removed
    """
    target, capacity_str = text.rsplit(":", 1)
    return target.strip(), capacity_str.strip()


def _split_stream_product(target: str) -> tuple[str, str]:
    """Split a "stream.Product" target on its first dot.

    Raises:
        ValueError: if either part is missing
    """
    if "." not in target:
        raise ValueError(f"Invalid target: '{target}'. Expected 'stream.Product'")
    stream, product = target.split(".", 1)
    stream, product = stream.strip(), product.strip()
    if not stream or not product:
        raise ValueError(f"Invalid target: '{target}'. Expected 'stream.Product'")
    return stream, product


def _parse_capacity_value(capacity_str: str, target: str) -> int:
    """Convert capacity string to a non-negative int.

    Precondition:
        capacity_str is a non-None string
        target is a non-None string (used for error messages)

    Postcondition:
        returns int value of capacity_str

    Args:
        capacity_str: string representation of a whole number
        target: buffer target (for error messages)

    Returns:
        int value of capacity_str

    Raises:
        ValueError: if capacity_str is not a non-negative whole number
    """
    try:
        capacity = int(capacity_str)
    except ValueError as exc:
        raise ValueError(
            f"Invalid capacity '{capacity_str}' for {target}. Must be a whole number."
        ) from exc
    if capacity < 0:
        raise ValueError(f"Invalid capacity '{capacity_str}' for {target}. Must not be negative.")
    return capacity


def parse_buffer_setting(text: str) -> tuple[str, str, int]:
    """Parse a 'stream.Product:Capacity' string.

    Precondition:
        text is a non-None string in format "stream.Product:Capacity"

    Postcondition:
        returns (stream_name, product_name, capacity) with names trimmed

    Args:
        text: String like "greenChips.Electronic Circuit:64"

    Returns:
        Tuple of (stream_name, product_name, capacity)

    Raises:
        ValueError: If format is invalid or capacity is not a whole number
    """
    _validate_has_colon(text)
    target, capacity_str = _split_target_capacity_string(text)
    stream, product = _split_stream_product(target)
    capacity = _parse_capacity_value(capacity_str, target)
    return stream, product, capacity
