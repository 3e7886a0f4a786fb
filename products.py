"""Item-type identifiers and the registries that hand them out."""

from dataclasses import dataclass

DEFAULT_MODULE = "factory"


@dataclass(frozen=True, order=True)
class Product:
    """An item type, identified by `id` within namespace `module`"""

    id: int
    module: int


class ModuleRegistry:
    """Assigns stable integer ids to module (namespace) names.

    The module named DEFAULT_MODULE always exists with id 0. Ids are handed
    out in registration order and live as long as the registry.
    """

    def __init__(self):
        self._ids: dict[str, int] = {DEFAULT_MODULE: 0}
        self._next = 1

    def get(self, name: str) -> int:
        """Get the id of a module, registering it on first use.

        Precondition:
            name is a non-empty string

        Postcondition:
            returns the same id for the same name on every call
            a new name receives the next unused id

        Args:
            name: module name

        Returns:
            integer module id
        """
        module_id = self._ids.get(name)
        if module_id is None:
            module_id = self._next
            self._ids[name] = module_id
            self._next += 1
        return module_id

    def __contains__(self, name: str) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._ids)


class ProductRegistry:
    """Owns the next-product-id counter for one factory."""

    def __init__(self):
        self._next = 0

    def create(self, module: int) -> Product:
        """Create a fresh Product in the given module."""
        product = Product(self._next, module)
        self._next += 1
        return product

    def __len__(self) -> int:
        return self._next
