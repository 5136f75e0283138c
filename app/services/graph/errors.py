class InvalidArgument(ValueError):
    """A traversal was requested without a start or target entity."""


class StoreUnavailable(RuntimeError):
    """The graph store could not be read (driver, transport or config failure)."""
