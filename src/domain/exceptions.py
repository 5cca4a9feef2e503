"""
domain.exceptions - Custom exception hierarchy for the tool-routing agent.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed.
"""


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class ToolValidationError(DomainError):
    """Raised when a capability receives malformed or missing arguments."""


class ExtractionError(DomainError):
    """Raised when an intent matched but its arguments could not be extracted.

    The message is user-facing: it explains what the dispatcher expected.
    """


class UnknownToolError(DomainError):
    """Raised when a tool name resolves to no capability, workflow or hosted tool."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class UnknownFlagError(DomainError):
    """Raised when a feature flag name is not recognised."""


class UpstreamServiceError(DomainError):
    """Raised when the language-model service (or its SDK) fails."""


class ProvisioningError(UpstreamServiceError):
    """Raised when a remote resource (container, vector store) cannot be created."""
