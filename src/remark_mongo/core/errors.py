"""Domain errors raised by the storage engine.

Every error is rendered as a plain string inside the RPC response envelope,
so the message is what the Remark42 server ends up showing in its logs.
Driver errors (``pymongo.errors.PyMongoError``) are never wrapped and reach
the router unchanged.
"""


class StoreError(RuntimeError):
    """Base exception for storage failures with a caller-facing message."""


class NotFoundError(StoreError):
    """Raised when an object is missing and the contract has no default value."""


class ConflictError(StoreError):
    """Raised when an insert collides with an existing document."""


class InvalidRequestError(StoreError):
    """Raised for malformed or unsupported request combinations."""


class PreconditionFailedError(StoreError):
    """Raised when the target exists but does not accept the operation."""
