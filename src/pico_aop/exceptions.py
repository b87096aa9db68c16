"""Exception hierarchy for pico-aop.

All engine-specific exceptions inherit from :class:`PicoAopError`, making it
easy to catch any pico-aop error with a single ``except PicoAopError`` clause.
Failures raised by advice bodies or by the real target are never wrapped.
"""

from typing import Any


class PicoAopError(Exception):
    """Base exception for all pico-aop errors."""

    pass


class ConfigurationError(PicoAopError):
    """Raised for setup problems detected at the registration call site."""

    def __init__(self, msg: str):
        super().__init__(msg)


class PointcutError(ConfigurationError):
    """Raised for a malformed pointcut predicate or a write to a frozen pointcut."""

    def __init__(self, msg: str):
        super().__init__(msg)


class RecordingStateError(ConfigurationError):
    """Raised when a recording request is issued while another is still pending.

    Attributes:
        owner: Name of the surrogate type whose controller was already recording.
    """

    def __init__(self, owner: Any):
        owner_name = getattr(owner, "__name__", str(owner))
        super().__init__(
            f"A recording request is already pending for proxy of '{owner_name}'; "
            "call a method on the proxy before starting a new one"
        )
        self.owner = owner


class StubbingError(ConfigurationError):
    """Raised when a stub cannot be armed (no selector, or incompatible behavior)."""

    def __init__(self, msg: str):
        super().__init__(msg)


class ProxyCreationError(PicoAopError):
    """Raised when a surrogate cannot be constructed for the requested type or instance."""

    def __init__(self, msg: str):
        super().__init__(msg)


class UnstubbedCallError(PicoAopError):
    """Raised by a strict mock when a call matches neither a stub nor an aspect.

    Attributes:
        descriptor: The :class:`OperationDescriptor` of the unhandled call.
    """

    def __init__(self, descriptor: Any):
        super().__init__(f"Unstubbed call on strict mock: {descriptor}")
        self.descriptor = descriptor
