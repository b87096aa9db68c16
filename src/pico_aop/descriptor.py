"""Operation descriptors: the runtime identity of an interceptable method.

A :class:`OperationDescriptor` is what every other part of the engine keys
on. Pointcuts match against it, stubs are stored by it, and advice receives
it through the :class:`~pico_aop.invocation.Invocation`.
"""

import functools
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple, get_type_hints

from .constants import AOP_MARKERS, DUNDER_RETURN_TYPES


@dataclass(frozen=True)
class OperationDescriptor:
    """Immutable identity of an operation on a proxied type.

    Two descriptors are equal when owner, name, parameter types and return
    type match; the underlying ``function`` takes no part in comparison.

    Attributes:
        owner: The class that declares the operation.
        name: The operation name (e.g. ``"size"``).
        parameter_types: Annotations of the parameters after ``self``, with
            ``typing.Any`` for unannotated ones.
        return_type: The declared return annotation, ``typing.Any`` if absent.
        function: The plain function or property getter, if one was found.
    """

    owner: type
    name: str
    parameter_types: Tuple[Any, ...] = ()
    return_type: Any = Any
    function: Optional[Callable[..., Any]] = field(default=None, compare=False, hash=False, repr=False)

    @property
    def markers(self) -> Tuple[Any, ...]:
        """Markers attached to the underlying function with :func:`annotate`."""
        return tuple(getattr(self.function, AOP_MARKERS, ()))

    @property
    def returns_none(self) -> bool:
        return self.return_type is None or self.return_type is type(None)

    @property
    def is_coroutine(self) -> bool:
        """Whether the operation is an ``async def``; its callers expect an awaitable."""
        return self.function is not None and inspect.iscoroutinefunction(self.function)

    def __str__(self) -> str:
        params = ", ".join(_type_name(p) for p in self.parameter_types)
        return f"{self.owner.__qualname__}.{self.name}({params}) -> {_type_name(self.return_type)}"


def _type_name(tp: Any) -> str:
    if tp is None or tp is type(None):
        return "None"
    if isinstance(tp, type):
        return tp.__qualname__
    return str(tp).replace("typing.", "")


def annotate(*markers: Any):
    """Decorator that attaches marker objects to a method.

    Markers are the hook for :meth:`Pointcut.annotated_with`::

        class Transactional: ...

        class OrderService:
            @annotate(Transactional)
            def place(self, order) -> Receipt:
                ...

    Args:
        *markers: One or more marker objects (usually classes).

    Returns:
        A decorator that stamps the markers onto the function.

    Raises:
        TypeError: If no marker is given, or the target is not callable.
    """
    if not markers:
        raise TypeError("annotate requires at least one marker")

    def dec(fn):
        target = fn.fget if isinstance(fn, property) else fn
        if not callable(target):
            raise TypeError("annotate can only decorate callables")
        existing = list(getattr(target, AOP_MARKERS, ()))
        for m in markers:
            if m not in existing:
                existing.append(m)
        setattr(target, AOP_MARKERS, tuple(existing))
        return fn

    return dec


def _declaring_class(cls: type, name: str) -> type:
    for klass in inspect.getmro(cls):
        if name in vars(klass):
            return klass
    return cls


def _resolve_hints(function: Callable[..., Any]) -> dict:
    try:
        return get_type_hints(function, include_extras=True)
    except Exception:
        return dict(getattr(function, "__annotations__", {}) or {})


def _signature_types(function: Callable[..., Any], skip_first: bool) -> Tuple[Tuple[Any, ...], Any]:
    try:
        sig = inspect.signature(function)
    except (TypeError, ValueError):
        return (), Any

    hints = _resolve_hints(function)
    params = list(sig.parameters.values())
    if skip_first and params and params[0].kind in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        params = params[1:]

    param_types = tuple(hints.get(p.name, Any) for p in params)
    if "return" in hints:
        ret = hints["return"]
        return param_types, type(None) if ret is None else ret
    return param_types, Any


def describe(cls: type, name: str) -> OperationDescriptor:
    """Build the descriptor of operation *name* on *cls* by reflection.

    Static methods and class methods are described without their implicit
    first parameter. Properties and cached properties are described as
    zero-argument operations returning the getter's return type. Protocol dunders inherited from ``object`` or a builtin
    fall back to the return types in ``DUNDER_RETURN_TYPES``.

    Raises:
        AttributeError: If *cls* has no attribute *name*.
    """
    owner = _declaring_class(cls, name)
    raw = inspect.getattr_static(cls, name)

    if isinstance(raw, (property, functools.cached_property)):
        function = raw.fget if isinstance(raw, property) else raw.func
        _, ret = _signature_types(function, skip_first=True) if function else ((), Any)
        return OperationDescriptor(owner=owner, name=name, parameter_types=(), return_type=ret, function=function)

    skip_first = True
    function = raw
    if isinstance(raw, staticmethod):
        function, skip_first = raw.__func__, False
    elif isinstance(raw, classmethod):
        function = raw.__func__

    param_types, ret = _signature_types(function, skip_first)
    if ret is Any and name in DUNDER_RETURN_TYPES:
        ret = DUNDER_RETURN_TYPES[name]
        ret = type(None) if ret is None else ret
    return OperationDescriptor(
        owner=owner,
        name=name,
        parameter_types=param_types,
        return_type=ret,
        function=function if callable(function) else None,
    )
