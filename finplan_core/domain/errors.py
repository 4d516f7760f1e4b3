from __future__ import annotations


class FinPlanError(Exception):
    """Base class for engine errors; ``code`` is stable and safe to expose over an API."""

    code = "FINPLAN_ERROR"


class ValidationError(FinPlanError, ValueError):
    code = "VALIDATION_FAILED"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class InconsistentStateError(FinPlanError, ValueError):
    code = "INCONSISTENT_STATE"


class BatchMaterializationError(FinPlanError):
    """A batch was rejected as a whole; nothing from it was stored."""

    code = "BATCH_REJECTED"

    def __init__(self, message: str, source_id: str | None = None, size: int = 0):
        super().__init__(message)
        self.source_id = source_id
        self.size = size
