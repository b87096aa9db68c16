"""Constants used throughout the pico-aop engine.

This module defines the attribute names stamped onto decorated functions,
the package logger, and the well-known protocol return types used when a
method carries no annotations of its own.
"""

import logging
from typing import Any, Dict, Iterator

LOGGER_NAME: str = "pico_aop"
"""Default logger name for the pico-aop engine."""

LOGGER: logging.Logger = logging.getLogger(LOGGER_NAME)
"""Package logger for pico-aop internal diagnostics."""

AOP_MARKERS: str = "_pico_aop_markers_"
"""Attribute name storing the marker objects attached with :func:`annotate`."""

PROXY_CONTROLLER: str = "_pico_aop_controller"
"""Slot name under which a surrogate keeps its :class:`DispatchController`."""

DUNDER_RETURN_TYPES: Dict[str, Any] = {
    "__str__": str,
    "__len__": int,
    "__bool__": bool,
    "__iter__": Iterator[Any],
    "__contains__": bool,
    "__getitem__": Any,
    "__setitem__": None,
    "__delitem__": None,
    "__call__": Any,
    "__enter__": Any,
    "__exit__": Any,
}
"""Protocol methods routed through dispatch, with their implied return types."""
