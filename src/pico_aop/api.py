"""Public entry points: ``mock``, ``spy``, ``proxy`` and ``reset``."""

from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

from .aspect import Aspect, Binder
from .config import ProxySettings
from .constants import LOGGER
from .exceptions import ConfigurationError, ProxyCreationError
from .proxy import controller_of, create_proxy

T = TypeVar("T")


def _settings(settings: Optional[ProxySettings], overrides: dict) -> ProxySettings:
    base = settings or ProxySettings()
    return base.with_overrides(**overrides) if overrides else base


def mock(cls: Type[T], *, settings: Optional[ProxySettings] = None, **overrides: Any) -> T:
    """Create a target-less proxy of *cls*.

    Unstubbed calls answer the default of their declared return type (or
    raise, for a ``strict`` mock)::

        repo = mock(Repository, strict=True)
        do_return(3).when(repo).count()

    Args:
        cls: The class (or ABC / protocol class) to mock.
        settings: Base :class:`ProxySettings`.
        **overrides: Individual settings fields, e.g. ``name="repo"``.

    Raises:
        ProxyCreationError: If *cls* is not a class.
    """
    return create_proxy(cls, settings=_settings(settings, overrides))


def spy(instance: T, *, settings: Optional[ProxySettings] = None, **overrides: Any) -> T:
    """Create a proxy delegating to *instance*; stubbed operations override it.

    Raises:
        ProxyCreationError: If *instance* is ``None`` or a class.
    """
    if instance is None or isinstance(instance, type):
        raise ProxyCreationError(f"spy() requires an instance, got {instance!r}")
    return create_proxy(type(instance), target=instance, settings=_settings(settings, overrides))


def reset(proxy: Any) -> None:
    """Drop every stub registered on *proxy*; aspects stay in place."""
    controller_of(proxy).reset_stubs()


class ProxyBuilder(Generic[T]):
    """Fluent builder for AOP-decorated proxies.

    Example::

        actions = []
        s = (
            proxy(Inventory)
            .by_instance(Inventory())
            .aop(lambda binder: binder.do_before(lambda b: actions.append(b.name)).when().size())
            .build()
        )

    Aspects are registered in the order ``aspects()`` and ``aop()`` were
    called; within one ``aop()`` callback, in declaration order.
    """

    def __init__(self, cls: Type[T]):
        if not isinstance(cls, type):
            raise ProxyCreationError(f"Cannot proxy {cls!r}: a class is required")
        self._cls = cls
        self._instance: Any = None
        self._steps: List[Callable[[Any], List[Aspect]]] = []
        self._settings = ProxySettings()

    def by_instance(self, instance: T) -> "ProxyBuilder[T]":
        if not isinstance(instance, self._cls):
            raise ProxyCreationError(f"Instance of '{type(instance).__qualname__}' is not a '{self._cls.__qualname__}'")
        self._instance = instance
        return self

    def by_type(self) -> "ProxyBuilder[T]":
        """Build a target-less proxy (a mock decorated with aspects)."""
        self._instance = None
        return self

    def settings(self, settings: Optional[ProxySettings] = None, **overrides: Any) -> "ProxyBuilder[T]":
        self._settings = _settings(settings or self._settings, overrides)
        return self

    def aspects(self, *aspects: Aspect) -> "ProxyBuilder[T]":
        for a in aspects:
            if not isinstance(a, Aspect):
                raise ConfigurationError(f"Expected an Aspect, got {type(a).__name__}")
        self._steps.append(lambda _proxy: list(aspects))
        return self

    def aop(self, configure: Callable[[Binder], Any]) -> "ProxyBuilder[T]":
        """Declare aspects with a :class:`Binder` callback, run at build time."""
        if not callable(configure):
            raise ConfigurationError("aop() expects a callable taking a Binder")

        def step(proxy: Any) -> List[Aspect]:
            binder = Binder(proxy)
            configure(binder)
            if controller_of(proxy).is_recording:
                raise ConfigurationError("when() inside aop() was not followed by a call on the proxy")
            return binder.build()

        self._steps.append(step)
        return self

    def build(self) -> T:
        """Create the proxy and attach every declared aspect.

        Raises:
            ConfigurationError: If an ``aop()`` callback leaves a recording
                request without a call.
        """
        result = create_proxy(self._cls, target=self._instance, settings=self._settings)
        controller = controller_of(result)
        for step in self._steps:
            for aspect in step(result):
                controller.add_aspect(aspect)
        LOGGER.debug("Built proxy of %s with %d aspect(s)", self._cls.__qualname__, len(controller.aspects))
        return result


def proxy(cls: Type[T]) -> ProxyBuilder[T]:
    return ProxyBuilder(cls)
