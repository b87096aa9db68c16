"""Record-then-arm stubbing.

Two equivalent shapes configure the behavior of one operation of a proxy.

Behavior first, then the call that selects the operation::

    do_return(7).when(items).size()
    do_throw(IndexError("boom")).when(items).get(any_int())

The call first, then the behavior. Python evaluates arguments before the
callee, so the call is passed as a thunk that runs while recording::

    when(lambda: items.size()).then_return(7)
    when(lambda: items.get(any_int())).then_throw(IndexError("boom"))

In both shapes the selecting call does not reach the real object; it returns
the declared default and its value is discarded. Stubbing the same operation
again registers a new stub that shadows the previous one.

On ``async def`` operations the return, throw and do-nothing stubs answer an
awaitable, so ``await items.fetch()`` yields the stubbed value or raises the
stubbed failure.
"""

import logging
from typing import Any, Callable

from ._state import expecting
from .advice import Advice
from .defaults import default_value
from .descriptor import OperationDescriptor
from .dispatch import DispatchController
from .exceptions import StubbingError
from .invocation import Invocation, completed, failed
from .proxy import controller_of

_logger = logging.getLogger(__name__)


def _returning(value: Any) -> Advice:
    def advice(inv: Invocation) -> Any:
        return completed(value) if inv.descriptor.is_coroutine else value

    return advice


def _check_throwable(error: Any) -> None:
    if isinstance(error, BaseException):
        return
    if isinstance(error, type) and issubclass(error, BaseException):
        return
    raise StubbingError(f"Stubbed failure must be an exception instance or class, got {error!r}")


def _raising(error: Any) -> Advice:
    _check_throwable(error)

    def advice(inv: Invocation) -> Any:
        if inv.descriptor.is_coroutine:
            return failed(error)
        raise error

    return advice


def _answering(fn: Callable[[Invocation], Any]) -> Advice:
    if not callable(fn):
        raise StubbingError(f"Stub answer must be callable, got {fn!r}")
    return fn


def _nothing(inv: Invocation) -> Any:
    return completed(None) if inv.descriptor.is_coroutine else None


def _real_method(inv: Invocation) -> Any:
    return inv.proceed()


def _check_nothing_allowed(descriptor: OperationDescriptor) -> None:
    rt = descriptor.return_type
    if not (descriptor.returns_none or rt is Any):
        raise StubbingError(f"do_nothing() only applies to operations returning None; {descriptor} returns a value")


class StubBuilder:
    """Behavior waiting for the call that selects its operation.

    Created by :func:`do_return`, :func:`do_throw`, :func:`do_around`,
    :func:`do_answer`, :func:`do_nothing` and :func:`do_call_real_method`.
    """

    def __init__(self, advice: Advice, *, none_only: bool = False):
        self._advice = advice
        self._none_only = none_only

    def when(self, proxy: Any) -> Any:
        """Put *proxy* in recording mode and return it.

        The next call on the returned proxy selects the operation and arms the
        stub. That call returns the declared default of the operation.

        Raises:
            TypeError: If *proxy* is not a pico-aop proxy.
            RecordingStateError: If a recording request is already pending.
        """
        controller = controller_of(proxy)
        advice = self._advice
        none_only = self._none_only

        def on_capture(descriptor: OperationDescriptor) -> None:
            if none_only:
                _check_nothing_allowed(descriptor)
            controller.add_stub(descriptor, advice)

        controller.begin_recording(on_capture)
        return proxy


class OngoingStubbing:
    """Handle on a recorded operation; each ``then_*`` call arms a new stub.

    Attributes:
        controller: The controller of the proxy that received the call.
        selector: Descriptor of the recorded operation.
    """

    def __init__(self, controller: DispatchController, selector: OperationDescriptor):
        self.controller = controller
        self.selector = selector

    def _arm(self, advice: Advice) -> "OngoingStubbing":
        self.controller.add_stub(self.selector, advice)
        return self

    def then_return(self, value: Any) -> "OngoingStubbing":
        return self._arm(_returning(value))

    def then_throw(self, error: Any) -> "OngoingStubbing":
        return self._arm(_raising(error))

    def then_around(self, fn: Callable[[Invocation], Any]) -> "OngoingStubbing":
        return self._arm(_answering(fn))

    then_answer = then_around

    def then_do_nothing(self) -> "OngoingStubbing":
        _check_nothing_allowed(self.selector)
        return self._arm(_nothing)

    def then_call_real_method(self) -> "OngoingStubbing":
        return self._arm(_real_method)

    def __repr__(self) -> str:
        return f"OngoingStubbing({self.selector})"


def when(call: Callable[[], Any]) -> OngoingStubbing:
    """Record the first proxy call made by *call* and return a stubbing handle.

    Args:
        call: A zero-argument callable that calls one operation on a proxy,
            typically ``lambda: proxy.operation(args)``.

    Raises:
        StubbingError: If *call* is not callable or makes no proxy call.
    """
    if not callable(call):
        raise StubbingError(
            "when() expects a zero-argument callable that calls the proxy, e.g. when(lambda: items.size())"
        )
    with expecting() as expectation:
        call()
    if expectation.selector is None:
        raise StubbingError("No proxy call was recorded inside when(); nothing to stub")
    _logger.debug("Recorded %s for stubbing", expectation.selector)
    return OngoingStubbing(expectation.controller, expectation.selector)


def do_return(value: Any) -> StubBuilder:
    return StubBuilder(_returning(value))


def do_throw(error: Any) -> StubBuilder:
    """Stub the selected operation to raise *error* (an exception instance or class)."""
    return StubBuilder(_raising(error))


def do_around(fn: Callable[[Invocation], Any]) -> StubBuilder:
    """Stub the selected operation with *fn*, which receives the :class:`Invocation`.

    *fn* decides whether and how often to call ``invocation.proceed()``; on a
    mock, proceeding answers the declared default.
    """
    return StubBuilder(_answering(fn))


do_answer = do_around


def do_nothing() -> StubBuilder:
    """Stub an operation returning ``None`` to do nothing.

    Selecting an operation that declares a return value raises
    :class:`~pico_aop.exceptions.StubbingError` from the selecting call.
    """
    return StubBuilder(_nothing, none_only=True)


def do_call_real_method() -> StubBuilder:
    return StubBuilder(_real_method)


# Argument placeholders: stubs select by operation, never by argument value,
# so these only make the selecting call read naturally.

def any_(tp: Any = None) -> Any:
    return default_value(tp)


def any_int() -> int:
    return 0


def any_float() -> float:
    return 0.0


def any_str() -> str:
    return ""


def any_bool() -> bool:
    return False
