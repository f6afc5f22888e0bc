"""Error taxonomy shared by the storage layer, the draw engine and services."""


class LuckyDrawError(Exception):
    """Base class for every error raised by the package."""

    def __init__(self, message, code=None, details=None):
        self.message = message
        self.code = code
        self.details = details
        super().__init__(self.message)


class ValidationError(LuckyDrawError):
    """Input data violates a model invariant (e.g. contest window, prize quantity)."""

    def __init__(self, message, details=None):
        super().__init__(message, code="validation_error", details=details)


class NotFoundError(LuckyDrawError):
    """The targeted record does not exist."""

    def __init__(self, entity, record_id, details=None):
        self.entity = entity
        self.record_id = record_id
        super().__init__(
            f"{entity} {record_id} not found", code="not_found", details=details
        )


class PersistenceError(LuckyDrawError):
    """Neither the remote nor the local store could persist the change."""

    def __init__(self, message, details=None):
        super().__init__(message, code="persistence_error", details=details)


class RemoteUnavailableError(LuckyDrawError):
    """The remote store failed or refused the operation.

    Always recovered by the fallback layer; never reaches callers of
    :class:`~luckydraw.storage.fallback.FallbackRepository`.
    """

    def __init__(self, operation, table, details=None):
        self.operation = operation
        self.table = table
        super().__init__(
            f"Remote {operation} on '{table}' failed",
            code="remote_unavailable",
            details=details,
        )


class DrawError(LuckyDrawError):
    """Base class for draw precondition failures."""


class EmptyPoolError(DrawError):
    def __init__(self, contest_id=None):
        super().__init__(
            "No validated participants found for this contest",
            code="empty_pool",
            details={"contest_id": contest_id},
        )


class OverselectionError(DrawError):
    def __init__(self, requested, available):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Number of winners ({requested}) cannot exceed number of "
            f"validated participants ({available})",
            code="overselection",
            details={"requested": requested, "available": available},
        )


class InvalidSelectionError(DrawError):
    def __init__(self, message, details=None):
        super().__init__(message, code="invalid_selection", details=details)


class InvalidTransitionError(LuckyDrawError):
    """A winner's prize status may only move forward."""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move prize status from {current} to {requested}",
            code="invalid_transition",
            details={"current": current, "requested": requested},
        )
