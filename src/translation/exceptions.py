"""
Workflow Exceptions

Errors raised by the translation request store and the workflow manager.
Every error carries a machine-readable code so the web layer can map it to
a response without string matching.
"""


class WorkflowError(Exception):
    """Base class for workflow errors, with optional code and details."""

    code = "workflow_error"

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(WorkflowError):
    """Input rejected before touching the store."""

    code = "validation_error"


class DuplicateKeyError(WorkflowError):
    """A key with the same name (case-insensitive) already exists in the project."""

    code = "duplicate_key"

    def __init__(self, project: str, key: str, existing_id: str = None):
        super().__init__(
            f"This key already exists in the {project} project",
            details={"project": project, "key": key, "existing_id": existing_id},
        )
        self.project = project
        self.key = key
        self.existing_id = existing_id


class EmptySelectionError(WorkflowError):
    """A batch send was requested with no keys selected."""

    code = "empty_selection"

    def __init__(self, message: str = "Select at least one translation key to send"):
        super().__init__(message)


class InvalidSelectionError(WorkflowError):
    """A batch selection contains keys that are no longer in progress."""

    code = "invalid_selection"


class RequestNotFoundError(WorkflowError):
    """No request with the given id exists in the store."""

    code = "not_found"


class StaleDraftResult(WorkflowError):
    """A draft result arrived for source text that has since changed."""

    code = "stale_draft"

    def __init__(self, snapshot: str, current_snapshot: str = None):
        super().__init__(
            "Draft result discarded: the source text changed while it was generated",
            details={"snapshot": snapshot, "current_snapshot": current_snapshot},
        )
        self.snapshot = snapshot
        self.current_snapshot = current_snapshot
