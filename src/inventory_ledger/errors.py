"""Error taxonomy raised by the ledger services.

None of these are retried by the services themselves; they propagate to the
caller, which decides what to do.
"""

from __future__ import annotations


class InventoryError(RuntimeError):
    """Base class for every domain error."""


class ValidationError(InventoryError):
    """Input has the wrong shape or is out of range."""


class NotFoundError(InventoryError):
    """A referenced product, location or session does not exist."""


class ConflictError(InventoryError):
    """The request collides with existing state, e.g. a second active session."""


class AccessDeniedError(InventoryError):
    """The session is missing or belongs to another actor."""


class InvalidStateError(InventoryError):
    """The session is no longer active."""


__all__ = [
    "AccessDeniedError",
    "ConflictError",
    "InvalidStateError",
    "InventoryError",
    "NotFoundError",
    "ValidationError",
]
