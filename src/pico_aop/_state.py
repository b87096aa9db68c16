# pico_aop/_state.py
from contextvars import ContextVar
from typing import Any, Optional
from contextlib import contextmanager


class Expectation:
    """An open ``when(...)`` request waiting for the first proxy call."""

    __slots__ = ("controller", "selector", "open")

    def __init__(self) -> None:
        self.controller: Any = None
        self.selector: Any = None
        self.open = True


_expectation: ContextVar[Optional[Expectation]] = ContextVar("pico_aop_expectation", default=None)


def claim_expectation() -> Optional[Expectation]:
    """Return the open expectation of this context and close it, if any."""
    exp = _expectation.get()
    if exp is None or not exp.open:
        return None
    exp.open = False
    return exp


@contextmanager
def expecting():
    """Context manager: open an expectation within the block."""
    exp = Expectation()
    tok = _expectation.set(exp)
    try:
        yield exp
    finally:
        _expectation.reset(tok)
