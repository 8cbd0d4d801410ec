"""Error taxonomy shared by the inventory services and the layout engine.

The HTTP layer maps these to status codes; nothing below it knows about
protocols.
"""


class InventoryError(Exception):
    """Base class for every domain failure raised by the core packages."""


class NotFoundError(InventoryError, LookupError):
    """A referenced station, bay, audit or station set resolved to nothing."""


class ConflictError(InventoryError, ValueError):
    """A name or number collision, or a forbidden lifecycle transition."""


class InvalidRequestError(InventoryError, ValueError):
    """Well-formed input that cannot be applied (e.g. a template for another device type)."""
