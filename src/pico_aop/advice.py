"""The advice algebra.

Every advice is reduced to the canonical *around* form: a callable taking an
:class:`~pico_aop.invocation.Invocation` and returning the call's value. The
derived forms below wrap a side-effecting function that receives a small
event record instead of the invocation, so it can observe but not steer the
call::

    log = []
    advice = before(lambda event: log.append(event.name))
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, Tuple

from .descriptor import OperationDescriptor
from .exceptions import ConfigurationError
from .invocation import Invocation


class Advice(Protocol):
    """Protocol of the canonical around form.

    The execution engine only understands this shape::

        def timing(inv: Invocation):
            start = time.perf_counter()
            try:
                return inv.proceed()
            finally:
                print(inv.name, time.perf_counter() - start)
    """

    def __call__(self, invocation: Invocation) -> Any: ...


@dataclass(frozen=True)
class Before:
    """Event passed to before advice."""

    descriptor: OperationDescriptor
    args: Tuple[Any, ...]
    kwargs: dict

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass(frozen=True)
class AfterReturning:
    """Event passed to after-returning advice, carrying the returned value."""

    descriptor: OperationDescriptor
    args: Tuple[Any, ...]
    kwargs: dict
    value: Any

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass(frozen=True)
class AfterThrowing:
    """Event passed to after-throwing advice, carrying the raised exception."""

    descriptor: OperationDescriptor
    args: Tuple[Any, ...]
    kwargs: dict
    error: BaseException

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass(frozen=True)
class After:
    """Event passed to after advice.

    Exactly one of ``value`` and ``error`` is meaningful: ``error`` is ``None``
    when the call returned normally.
    """

    descriptor: OperationDescriptor
    args: Tuple[Any, ...]
    kwargs: dict
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def succeeded(self) -> bool:
        return self.error is None


def before(fn: Callable[[Before], Any]) -> Advice:
    """Run *fn* before the call; its failure aborts the call before proceeding."""

    def advice(inv: Invocation) -> Any:
        fn(Before(inv.descriptor, inv.args, inv.kwargs))
        return inv.proceed()

    advice.__qualname__ = f"before({getattr(fn, '__qualname__', fn)!s})"
    return advice


def after_returning(fn: Callable[[AfterReturning], Any]) -> Advice:
    """Run *fn* after a normal return; the original value is still returned."""

    def advice(inv: Invocation) -> Any:
        value = inv.proceed()
        fn(AfterReturning(inv.descriptor, inv.args, inv.kwargs, value))
        return value

    advice.__qualname__ = f"after_returning({getattr(fn, '__qualname__', fn)!s})"
    return advice


def after_throwing(fn: Callable[[AfterThrowing], Any]) -> Advice:
    """Run *fn* when the call raises, then re-raise the original exception.

    *fn* can observe the failure but never suppress or replace it: if *fn*
    itself raises, the original exception is still the one propagated.
    """

    def advice(inv: Invocation) -> Any:
        try:
            return inv.proceed()
        except Exception as e:
            try:
                fn(AfterThrowing(inv.descriptor, inv.args, inv.kwargs, e))
            finally:
                raise e

    advice.__qualname__ = f"after_throwing({getattr(fn, '__qualname__', fn)!s})"
    return advice


def after(fn: Callable[[After], Any]) -> Advice:
    """Run *fn* exactly once after the call, whatever its outcome.

    Behaves like a ``finally`` block: the original value is returned, or the
    original exception re-raised. A failure raised by *fn* itself replaces
    the outcome, as a raising ``finally`` block would.
    """

    def advice(inv: Invocation) -> Any:
        value = None
        error: Optional[BaseException] = None
        try:
            value = inv.proceed()
            return value
        except BaseException as e:
            error = e
            raise
        finally:
            fn(After(inv.descriptor, inv.args, inv.kwargs, value, error))

    advice.__qualname__ = f"after({getattr(fn, '__qualname__', fn)!s})"
    return advice


def around(fn: Callable[[Invocation], Any]) -> Advice:
    """Use *fn* as the advice itself; it has full control over the call."""
    if not callable(fn):
        raise ConfigurationError(f"around() expects a callable taking an Invocation, got {fn!r}")
    return fn
