"""Aspects and the fluent binder used to declare them.

An :class:`Aspect` pairs one :class:`~pico_aop.pointcut.Pointcut` with an
ordered list of advice. Aspects are usually declared through a
:class:`Binder` handed to the ``aop`` callback of the proxy builder::

    def configure(binder: Binder):
        binder.do_before(lambda b: log.append(b.name)).when().size()
        binder.do_around(timed).return_type(int, float)

The first line shows the recording form of method selection: ``when()``
returns the proxy in recording mode and the next call on it becomes an
exact-match predicate.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

from . import advice as _advice
from .advice import Advice
from .descriptor import OperationDescriptor
from .exceptions import ConfigurationError
from .pointcut import Pointcut, Predicate

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Aspect:
    """A pointcut and the advice applied to every operation it matches.

    Attributes:
        pointcut: Selects the operations the advice applies to.
        advices: Advice in declaration order; the first runs outermost.
        name: Optional label used in logs and reprs.

    Raises:
        ConfigurationError: If no advice is given or one is not callable.
    """

    pointcut: Pointcut
    advices: Tuple[Advice, ...]
    name: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if not isinstance(self.pointcut, Pointcut):
            raise ConfigurationError(f"Aspect requires a Pointcut, got {type(self.pointcut).__name__}")
        advices = tuple(self.advices)
        if not advices:
            raise ConfigurationError("Aspect requires at least one advice")
        for a in advices:
            if not callable(a):
                raise ConfigurationError(f"Advice must be callable, got {a!r}")
        object.__setattr__(self, "advices", advices)

    @classmethod
    def of(cls, pointcut: Pointcut, *advices: Advice, name: Optional[str] = None) -> "Aspect":
        return cls(pointcut=pointcut, advices=advices, name=name)

    def matches(self, descriptor: OperationDescriptor) -> bool:
        return self.pointcut.matches(descriptor)


class PointcutBuilder:
    """Selects the operations one advice applies to.

    Every selector call appends a predicate; all of them must hold. Returned
    by the ``do_*`` methods of :class:`Binder`.
    """

    def __init__(self, binder: "Binder", advice: Advice):
        self._binder = binder
        self._advice = advice
        self._pointcut = Pointcut()

    def when(self) -> Any:
        """Return the proxy in recording mode; the next call on it is the selector.

        Raises:
            ConfigurationError: If the binder is not attached to a proxy.
            RecordingStateError: If a recording request is already pending.
        """
        proxy = self._binder.proxy
        if proxy is None:
            raise ConfigurationError("when() requires a binder attached to a proxy")
        from .proxy import controller_of

        pointcut = self._pointcut

        def on_capture(descriptor: OperationDescriptor) -> None:
            pointcut.add(lambda d: d == descriptor)

        controller_of(proxy).begin_recording(on_capture)
        return proxy

    def return_type(self, *return_types: Any) -> "PointcutBuilder":
        self._pointcut.return_type(*return_types)
        return self

    def annotated_with(self, *markers: Any) -> "PointcutBuilder":
        self._pointcut.annotated_with(*markers)
        return self

    def where_method(self, predicate: Predicate) -> "PointcutBuilder":
        self._pointcut.where_method(predicate)
        return self

    def all_methods(self) -> "PointcutBuilder":
        self._pointcut.all_methods()
        return self

    def build(self) -> Aspect:
        return Aspect.of(self._pointcut, self._advice)


class Binder:
    """Collects aspects declared with the ``do_*`` methods, in declaration order.

    Args:
        proxy: The surrogate that ``when()`` records against. May be ``None``
            when only predicate selectors are used.
    """

    def __init__(self, proxy: Any = None):
        self.proxy = proxy
        self._builders: List[PointcutBuilder] = []

    def _bind(self, advice: Advice) -> PointcutBuilder:
        builder = PointcutBuilder(self, advice)
        self._builders.append(builder)
        return builder

    def do_before(self, fn: Callable[[_advice.Before], Any]) -> PointcutBuilder:
        return self._bind(_advice.before(fn))

    def do_after_returning(self, fn: Callable[[_advice.AfterReturning], Any]) -> PointcutBuilder:
        return self._bind(_advice.after_returning(fn))

    def do_after_throwing(self, fn: Callable[[_advice.AfterThrowing], Any]) -> PointcutBuilder:
        return self._bind(_advice.after_throwing(fn))

    def do_after(self, fn: Callable[[_advice.After], Any]) -> PointcutBuilder:
        return self._bind(_advice.after(fn))

    def do_around(self, fn: Callable[..., Any]) -> PointcutBuilder:
        return self._bind(_advice.around(fn))

    def build(self) -> List[Aspect]:
        aspects = [b.build() for b in self._builders]
        _logger.debug("Binder produced %d aspect(s)", len(aspects))
        return aspects
