"""Typed errors raised by the expression, tessellation and Fourier modules.

Every error carries a stable ``code`` and a human-readable message. They are
recovered at the request boundary (session, REST route, WebSocket handler)
and turned into ``{code, message, severity}`` payloads.
"""

from enum import Enum


class Severity(Enum):
    OK = "ok"
    ERROR = "error"


class SurfaceError(ValueError):
    """Base class for all request-scoped failures."""

    code = "SURFACE_ERROR"
    severity = Severity.ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
        }


class EmptyExpression(SurfaceError):
    code = "EMPTY_EXPRESSION"

    def __init__(self):
        super().__init__("Expression is empty.")


class CompileError(SurfaceError):
    code = "COMPILE_ERROR"

    def __init__(self, source: str, underlying_message: str, message: str | None = None):
        self.source = source
        self.underlying_message = underlying_message
        super().__init__(message or f"Could not parse expression: {underlying_message}")


class EmptyBound(SurfaceError):
    code = "EMPTY_BOUND"

    def __init__(self):
        super().__init__("Parameter bound expression is empty.")


class NonFiniteBound(SurfaceError):
    code = "NON_FINITE_BOUND"

    def __init__(self, source: str):
        self.source = source
        super().__init__(f'Expression "{source}" evaluated to non-finite value.')


class InvalidGridSpec(SurfaceError):
    code = "INVALID_GRID_SPEC"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class EvaluationError(SurfaceError):
    code = "EVALUATION_ERROR"

    def __init__(self, u: float, v: float, underlying_message: str):
        self.u = u
        self.v = v
        self.underlying_message = underlying_message
        super().__init__(
            f"Error evaluating at (u, v) = ({u:.3f}, {v:.3f}): {underlying_message}"
        )


class NonFiniteVertex(SurfaceError):
    code = "NON_FINITE_VERTEX"

    def __init__(self, u: float, v: float):
        self.u = u
        self.v = v
        super().__init__(f"Non-finite value at (u, v) = ({u:.3f}, {v:.3f}).")


class InsufficientSamples(SurfaceError):
    code = "INSUFFICIENT_SAMPLES"

    def __init__(self, count: int, required: int):
        self.count = count
        self.required = required
        super().__init__(
            f"Draw a curve in the canvas first (at least ~{required} points, got {count})."
        )


class InvalidPreset(SurfaceError):
    code = "INVALID_PRESET"


class UnknownExample(SurfaceError):
    code = "UNKNOWN_EXAMPLE"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Unknown example: {key}")


class NoFourierFit(SurfaceError):
    code = "NO_FOURIER_FIT"

    def __init__(self):
        super().__init__("Compute a Fourier approximation first.")
