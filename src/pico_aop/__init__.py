# pico_aop/__init__.py
try:
    from ._version import __version__
except Exception:
    __version__ = "0.0.0"

from .advice import Advice, After, AfterReturning, AfterThrowing, Before, after, after_returning, after_throwing, around, before
from .api import ProxyBuilder, mock, proxy, reset, spy
from .aspect import Aspect, Binder, PointcutBuilder
from .config import ProxySettings
from .defaults import default_value
from .descriptor import OperationDescriptor, annotate, describe
from .dispatch import DispatchController, DispatchMode
from .exceptions import (
    ConfigurationError,
    PicoAopError,
    PointcutError,
    ProxyCreationError,
    RecordingStateError,
    StubbingError,
    UnstubbedCallError,
)
from .invocation import Invocation
from .pointcut import Pointcut
from .proxy import controller_of, create_proxy, is_proxy
from .stubbing import (
    OngoingStubbing,
    StubBuilder,
    any_,
    any_bool,
    any_float,
    any_int,
    any_str,
    do_answer,
    do_around,
    do_call_real_method,
    do_nothing,
    do_return,
    do_throw,
    when,
)

__all__ = [
    "__version__",
    "Advice",
    "After",
    "AfterReturning",
    "AfterThrowing",
    "Aspect",
    "Before",
    "Binder",
    "ConfigurationError",
    "DispatchController",
    "DispatchMode",
    "Invocation",
    "OngoingStubbing",
    "OperationDescriptor",
    "PicoAopError",
    "Pointcut",
    "PointcutBuilder",
    "PointcutError",
    "ProxyBuilder",
    "ProxyCreationError",
    "ProxySettings",
    "RecordingStateError",
    "StubBuilder",
    "StubbingError",
    "UnstubbedCallError",
    "after",
    "after_returning",
    "after_throwing",
    "annotate",
    "any_",
    "any_bool",
    "any_float",
    "any_int",
    "any_str",
    "around",
    "before",
    "controller_of",
    "create_proxy",
    "default_value",
    "describe",
    "do_answer",
    "do_around",
    "do_call_real_method",
    "do_nothing",
    "do_return",
    "do_throw",
    "is_proxy",
    "mock",
    "proxy",
    "reset",
    "spy",
    "when",
]
