"""Pointcuts: conjunctive predicate lists over operation descriptors.

A pointcut is built incrementally, each builder call appending one predicate,
and matched at dispatch time::

    pc = Pointcut().return_type(int).where_method(lambda d: d.name.startswith("get"))
    pc.matches(describe(Repo, "get_count"))

The empty pointcut matches every operation.
"""

import types
from typing import Any, Callable, List, Tuple, Union, get_args, get_origin, Annotated

from .descriptor import OperationDescriptor
from .exceptions import PointcutError

Predicate = Callable[[OperationDescriptor], bool]

# PEP 484 numeric promotion: an int is acceptable where a float is expected.
_NUMERIC_WIDENING = {
    float: (int,),
    complex: (float, int),
}


def _normalize_supplied(tp: Any) -> Any:
    if tp is None:
        return type(None)
    if tp is Any or isinstance(tp, type):
        return tp
    origin = get_origin(tp)
    if isinstance(origin, type):
        return origin
    raise PointcutError(f"return_type expects classes, got {tp!r}")


def _is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def _assignable(declared: Any, supplied: Tuple[Any, ...]) -> bool:
    if get_origin(declared) is Annotated:
        declared = get_args(declared)[0]
    if _is_union(declared):
        return all(_assignable(member, supplied) for member in get_args(declared))
    return any(_assignable_to(declared, s) for s in supplied)


def _assignable_to(declared: Any, supplied: Any) -> bool:
    if supplied is Any:
        return True
    if declared is None:
        declared = type(None)
    if declared is Any:
        return supplied is object
    origin = get_origin(declared)
    if origin is not None:
        declared = origin
    if not isinstance(declared, type):
        return False
    widened = (supplied,) + _NUMERIC_WIDENING.get(supplied, ())
    try:
        return any(issubclass(declared, candidate) for candidate in widened)
    except TypeError:
        return False


class Pointcut:
    """Ordered list of predicates; an operation matches iff all of them hold.

    Predicates are append-only while the pointcut is being built and frozen
    once the owning :class:`~pico_aop.aspect.Aspect` is attached to a proxy.
    Matching is evaluated on every call and never cached, since predicates
    may close over mutable state.
    """

    __slots__ = ("_predicates", "_frozen")

    def __init__(self, predicates: Tuple[Predicate, ...] = ()):
        self._predicates: List[Predicate] = list(predicates)
        self._frozen = False

    @classmethod
    def exact(cls, descriptor: OperationDescriptor) -> "Pointcut":
        """A pointcut matching only operations equal to *descriptor*."""
        return cls().where_method(lambda d: d == descriptor)

    @property
    def predicates(self) -> Tuple[Predicate, ...]:
        return tuple(self._predicates)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "Pointcut":
        self._frozen = True
        return self

    def add(self, predicate: Predicate) -> "Pointcut":
        """Append *predicate* to the conjunction.

        Raises:
            PointcutError: If the pointcut is frozen or *predicate* is not callable.
        """
        if self._frozen:
            raise PointcutError("Pointcut is frozen; predicates can only be added before the aspect is attached")
        if not callable(predicate):
            raise PointcutError(f"Pointcut predicate must be callable, got {predicate!r}")
        self._predicates.append(predicate)
        return self

    def return_type(self, *return_types: Any) -> "Pointcut":
        """Match operations whose declared return type is assignable to any of *return_types*.

        ``None`` stands for ``NoneType``; parameterised generics compare by
        origin; ``float`` and ``complex`` widen to the narrower numeric types.

        Raises:
            PointcutError: If no type is given or one is not a class.
        """
        if not return_types:
            raise PointcutError("return_type requires at least one type")
        supplied = tuple(_normalize_supplied(t) for t in return_types)
        return self.add(lambda d: _assignable(d.return_type, supplied))

    def annotated_with(self, *markers: Any) -> "Pointcut":
        """Match operations carrying any of *markers* (see :func:`~pico_aop.descriptor.annotate`)."""
        if not markers:
            raise PointcutError("annotated_with requires at least one marker")
        return self.add(lambda d: any(m in d.markers for m in markers))

    def where_method(self, predicate: Predicate) -> "Pointcut":
        """Match operations for which *predicate* returns true."""
        return self.add(predicate)

    def all_methods(self) -> "Pointcut":
        """Match everything; adds no predicate."""
        if self._frozen:
            raise PointcutError("Pointcut is frozen; predicates can only be added before the aspect is attached")
        return self

    def matches(self, descriptor: OperationDescriptor) -> bool:
        return all(bool(p(descriptor)) for p in self._predicates)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"Pointcut({len(self._predicates)} predicates, {state})"
