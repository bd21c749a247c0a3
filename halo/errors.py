"""Exception hierarchy for HALO services."""

from __future__ import annotations


class HaloError(Exception):
    """Base exception for HALO errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class TenantNotFoundError(HaloError):
    pass


class WorkflowNotFoundError(HaloError):
    pass


class StaleWorkflowError(HaloError):
    """A save named a workflow version that is no longer current."""

    def __init__(self, message: str, current_version: int | None = None):
        self.current_version = current_version
        super().__init__(message)


class InvalidWorkflowError(HaloError):
    """A workflow write violated a database constraint and was rolled back."""

    pass


class ImportFormatError(HaloError):
    pass


class ChatServiceError(HaloError):
    """The AI backend could not produce a reply."""

    pass


class ChatBusyError(HaloError):
    """A chat session already has a request in flight."""

    pass
