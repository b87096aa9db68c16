"""Surrogate construction.

:class:`InterceptingProxy` presents the operation surface of a proxied type
and routes every method call, property read and supported protocol method
through the surrogate's :class:`~pico_aop.dispatch.DispatchController`.

A proxy either wraps a real instance (spy / AOP decoration) or stands alone
(mock). ``isinstance(proxy, ProxiedType)`` holds in both cases.
A mock is truthy unless its type declares ``__bool__``; a spy takes the
truthiness of its target.
"""

import functools
import inspect
import logging
import threading
from typing import Any, Callable, Dict, Optional

from .config import ProxySettings
from .constants import DUNDER_RETURN_TYPES, PROXY_CONTROLLER
from .descriptor import OperationDescriptor, describe
from .dispatch import DispatchController
from .exceptions import ProxyCreationError

_logger = logging.getLogger(__name__)

_class_cache: Dict[type, type] = {}
_class_lock = threading.RLock()


def controller_of(proxy: Any) -> DispatchController:
    """Return the :class:`DispatchController` of *proxy*.

    Raises:
        TypeError: If *proxy* is not an :class:`InterceptingProxy`.
    """
    if not issubclass(type(proxy), InterceptingProxy):
        raise TypeError(f"Expected a pico-aop proxy, got {type(proxy).__name__}")
    return object.__getattribute__(proxy, PROXY_CONTROLLER)


def is_proxy(obj: Any) -> bool:
    return issubclass(type(obj), InterceptingProxy)


def _is_operation(raw: Any, owner: type, target: Any) -> bool:
    if inspect.isfunction(raw) or isinstance(raw, (staticmethod, classmethod)) or inspect.isbuiltin(raw):
        return True
    # Other non-data descriptors are operations only if they bind to a callable.
    if inspect.ismethoddescriptor(raw):
        return callable(raw.__get__(target, owner))
    return False


def _declares(cls: type, name: str) -> bool:
    return any(name in vars(klass) for klass in inspect.getmro(cls))


def _bound_operation(proxy: Any, controller: DispatchController, descriptor: OperationDescriptor, real: Optional[Callable[..., Any]]):
    def operation(*args, **kwargs):
        return controller.invoke(proxy, descriptor, args, kwargs, real)

    operation.__name__ = descriptor.name
    operation.__qualname__ = f"{descriptor.owner.__qualname__}.{descriptor.name}"
    operation.__doc__ = getattr(descriptor.function, "__doc__", None)
    return operation


class InterceptingProxy:
    """Base class of every generated surrogate class.

    Not instantiated directly; use :func:`create_proxy` (or the ``mock``,
    ``spy`` and ``proxy`` helpers of :mod:`pico_aop.api`).
    """

    __slots__ = (PROXY_CONTROLLER, "__dict__")

    def __init__(self, controller: DispatchController):
        object.__setattr__(self, PROXY_CONTROLLER, controller)

    @property
    def __class__(self):
        return object.__getattribute__(self, PROXY_CONTROLLER).owner

    def __getattr__(self, name: str) -> Any:
        controller: DispatchController = object.__getattribute__(self, PROXY_CONTROLLER)
        owner = controller.owner
        target = controller.target
        try:
            raw = inspect.getattr_static(owner, name)
        except AttributeError:
            if target is not None:
                return getattr(target, name)
            raise AttributeError(f"Mock of '{owner.__qualname__}' has no attribute '{name}'") from None

        if isinstance(raw, (property, functools.cached_property)):
            descriptor = describe(owner, name)
            real = (lambda: getattr(target, name)) if target is not None else None
            return controller.invoke(self, descriptor, (), {}, real)

        if _is_operation(raw, owner, target):
            descriptor = describe(owner, name)
            real = getattr(target, name) if target is not None else None
            return _bound_operation(self, controller, descriptor, real)

        return getattr(target, name) if target is not None else getattr(owner, name)

    def __setattr__(self, name: str, value: Any) -> None:
        target = object.__getattribute__(self, PROXY_CONTROLLER).target
        if target is not None:
            setattr(target, name, value)
        else:
            object.__setattr__(self, name, value)

    def __delattr__(self, name: str) -> None:
        target = object.__getattribute__(self, PROXY_CONTROLLER).target
        if target is not None:
            delattr(target, name)
        else:
            object.__delattr__(self, name)

    def __bool__(self) -> bool:
        target = object.__getattribute__(self, PROXY_CONTROLLER).target
        return bool(target) if target is not None else True

    def __dir__(self):
        controller = object.__getattribute__(self, PROXY_CONTROLLER)
        if controller.target is not None:
            return dir(controller.target)
        return dir(controller.owner)

    def __repr__(self) -> str:
        controller = object.__getattribute__(self, PROXY_CONTROLLER)
        if controller.settings.name:
            return f"<{controller.settings.name}>"
        kind = "spy" if controller.target is not None else "mock"
        return f"<{kind} of {controller.owner.__qualname__} at {id(self):#x}>"


def _special(name: str):
    def method(self, *args, **kwargs):
        controller = object.__getattribute__(self, PROXY_CONTROLLER)
        target = controller.target
        real = getattr(target, name) if target is not None else None
        return controller.invoke(self, describe(controller.owner, name), args, kwargs, real)

    method.__name__ = name
    return method


def _proxy_class(owner: type) -> type:
    with _class_lock:
        cls = _class_cache.get(owner)
        if cls is not None:
            return cls
        namespace: Dict[str, Any] = {"__slots__": (), "__module__": __name__}
        for name in DUNDER_RETURN_TYPES:
            if _declares(owner, name):
                namespace[name] = _special(name)
        cls = type(f"{owner.__name__}Proxy", (InterceptingProxy,), namespace)
        _class_cache[owner] = cls
        return cls


def create_proxy(owner: type, *, target: Any = None, settings: Optional[ProxySettings] = None) -> Any:
    """Build a surrogate of *owner*, wrapping *target* if given.

    Args:
        owner: The proxied type; its operations define the surrogate surface.
        target: A real instance of *owner*, or ``None`` for a mock.
        settings: Per-proxy :class:`ProxySettings`.

    Raises:
        ProxyCreationError: If *owner* is not a class, or *target* is not an
            instance of it.
    """
    if not isinstance(owner, type):
        raise ProxyCreationError(f"Cannot proxy {owner!r}: a class is required")
    if target is not None and not isinstance(target, owner):
        raise ProxyCreationError(f"Instance of '{type(target).__qualname__}' is not a '{owner.__qualname__}'")
    controller = DispatchController(owner, target=target, settings=settings)
    proxy = _proxy_class(owner)(controller)
    _logger.debug("Created %s for %s", "spy" if target is not None else "mock", owner.__qualname__)
    return proxy
