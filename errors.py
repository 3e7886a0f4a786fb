"""Errors raised while building or driving a factory."""


class FactoryError(ValueError):
    """Base class for construction and command errors.

    Args:
        message: human readable description
        name: the definition or stream name involved, if any
    """

    kind = "error"

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name


class MalformedInputError(FactoryError):
    """a value of the wrong kind was supplied"""

    kind = "malformed input"


class InvalidArgumentsError(MalformedInputError):
    """a call was given the wrong number or shape of arguments"""

    kind = "invalid arguments"


class DuplicateDefinitionError(FactoryError):
    """a name was registered twice"""

    kind = "duplicate definition"


class UnresolvedReferenceError(FactoryError):
    """an identifier does not resolve to a known product, recipe or stream"""

    kind = "unresolved reference"


class CycleError(FactoryError):
    """a stream (transitively) supplies its own input"""

    kind = "cycle"
