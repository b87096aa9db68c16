"""Default-value synthesis for declared return types.

A target-less mock has no real implementation to call, so an unmatched call
(and the discarded call made while recording) answers with the zero or empty
value of the declared return type. Reference-like types answer ``None``.
"""

import collections.abc
import types
from typing import Any, Callable, Dict, Union, get_args, get_origin, Annotated

_FACTORIES: Dict[Any, Callable[[], Any]] = {
    bool: lambda: False,
    int: lambda: 0,
    float: lambda: 0.0,
    complex: lambda: 0j,
    str: lambda: "",
    bytes: lambda: b"",
    bytearray: bytearray,
    list: list,
    dict: dict,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
}

_ITERATOR_TYPES = (
    collections.abc.Iterator,
    collections.abc.Iterable,
    collections.abc.Generator,
)


def default_value(return_type: Any) -> Any:
    """Return the zero/empty value for *return_type*.

    Args:
        return_type: A declared return annotation (a class, a parameterised
            generic, ``None``, or ``typing.Any``).

    Returns:
        ``0``/``0.0``/``False``/``""`` and empty containers for builtin value
        types, an exhausted iterator for iterator-like protocols, and ``None``
        for everything else.

    Example:
        >>> default_value(int), default_value(list[str]), default_value(None)
        (0, [], None)
    """
    if return_type is None or return_type is type(None) or return_type is Any:
        return None

    origin = get_origin(return_type)
    if origin is Annotated:
        return default_value(get_args(return_type)[0])
    if origin is Union or origin is types.UnionType:
        return None
    if origin is not None:
        return_type = origin

    factory = _FACTORIES.get(return_type)
    if factory is not None:
        return factory()
    if return_type in _ITERATOR_TYPES:
        return iter(())
    return None
