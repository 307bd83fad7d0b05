"""
Error taxonomy for composition, rendering and input validation.
"""

from typing import List, Optional


class SlidegenError(Exception):
    """Base class for all errors raised by slidegen."""


# Input validation

class ValidationError(SlidegenError):
    """Malformed external input. Carries the offending field path."""

    def __init__(self, message: str, field_path: str = "", issues: Optional[List[dict]] = None):
        super().__init__(message)
        self.message = message
        self.field_path = field_path
        self.issues = issues or []

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "field": self.field_path,
            "details": self.issues,
        }


# Composition

class ModuleCompositionError(SlidegenError):
    """A single module failed to produce its CSS, HTML or style variables.

    Never raised out of the composer; collected as a diagnostic instead.
    """

    def __init__(self, module_id: str, phase: str, cause: BaseException):
        super().__init__(f"Module '{module_id}' failed during {phase}: {cause}")
        self.module_id = module_id
        self.phase = phase
        self.cause = cause

    def to_dict(self) -> dict:
        return {"module": self.module_id, "phase": self.phase, "error": str(self.cause)}


# Rendering surface

class RenderError(SlidegenError):
    def __init__(self, message: str, job_index: Optional[int] = None):
        super().__init__(message)
        self.job_index = job_index


class RenderTimeoutError(RenderError):
    """The document did not reach readiness in time. Retryable by the caller."""


class CaptureError(RenderError):
    """Screenshot capture failed after the document loaded."""


class BatchDeadlineError(TimeoutError, SlidegenError):
    """A caller-supplied batch deadline expired before the job finished."""

    def __init__(self, job_index: int):
        super().__init__(f"Batch deadline exceeded before job #{job_index + 1} completed")
        self.job_index = job_index


# Registry configuration

class RegistryError(SlidegenError):
    pass


class DuplicateModuleError(RegistryError):
    def __init__(self, module_id: str):
        super().__init__(f"Module '{module_id}' is already registered")
        self.module_id = module_id


class DependencyError(RegistryError):
    def __init__(self, violations: List[str]):
        super().__init__("; ".join(violations))
        self.violations = violations
