"""Exception hierarchy for pipeline-xray.

All exceptions inherit from XRayError, providing a consistent error handling interface.
Unknown execution ids are not errors: registry lookups return None instead.
"""


class XRayError(Exception):
    """Base exception for all pipeline-xray errors."""


class TracingError(XRayError):
    """Base exception for misuse of the tracing API."""


class NoActiveExecutionError(TracingError):
    """Raised when a step operation is attempted while no execution is open."""

    def __init__(self, operation: str = "step operation") -> None:
        super().__init__(f"No active execution: cannot perform {operation}")
        self.operation = operation


class StepSealedError(TracingError):
    """Raised when a step recorder is modified or ended after it was sealed."""


class UnknownArtifactError(TracingError):
    """Raised when an evaluation references an artifact that was not added on the same step."""


class ReasonerError(XRayError):
    """Raised when the reasoner fails (transport error, timeout, malformed reply)."""


class InvalidFilterRuleError(ReasonerError):
    """Raised when the reasoner returns a filter rule outside the inferred schema or operator set."""
