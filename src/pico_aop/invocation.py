"""The per-call invocation context handed to every advice."""

from typing import Any, Callable, Dict, Optional, Tuple

from .descriptor import OperationDescriptor

Proceed = Callable[[Tuple[Any, ...], Dict[str, Any]], Any]


class Invocation:
    """A single call event on a surrogate.

    Created once per call by the :class:`~pico_aop.dispatch.DispatchController`
    and discarded when the call returns or raises. Carries a mutable ``local``
    dict for sharing state between advice of the same chain.

    Attributes:
        instance: The surrogate that received the call.
        target: The wrapped real object, or ``None`` for a mock.
        descriptor: The :class:`OperationDescriptor` of the called operation.
        args: Positional arguments snapshot.
        kwargs: Keyword arguments snapshot.
        local: Mutable dict for advice-to-advice communication.
    """

    __slots__ = ("instance", "target", "descriptor", "args", "kwargs", "local", "_proceed")

    def __init__(
        self,
        *,
        instance: object,
        target: Any,
        descriptor: OperationDescriptor,
        args: tuple,
        kwargs: dict,
        proceed: Proceed,
    ):
        self.instance = instance
        self.target = target
        self.descriptor = descriptor
        self.args = tuple(args)
        self.kwargs = dict(kwargs)
        self.local: Dict[str, Any] = {}
        self._proceed = proceed

    @property
    def name(self) -> str:
        return self.descriptor.name

    method_name = name

    @property
    def has_target(self) -> bool:
        return self.target is not None

    def proceed(self, args: Optional[tuple] = None, kwargs: Optional[dict] = None) -> Any:
        """Invoke the next link of the chain (ultimately the real method).

        May be called any number of times, including zero. Passing *args* or
        *kwargs* replaces the corresponding snapshot for the inner links only.

        Returns:
            Whatever the inner chain returns; its failures propagate unchanged.
        """
        call_args = self.args if args is None else tuple(args)
        call_kwargs = self.kwargs if kwargs is None else dict(kwargs)
        return self._proceed(call_args, call_kwargs)

    def derive(self, args: tuple, kwargs: dict, proceed: Proceed) -> "Invocation":
        """Return a view of this call for one chain link, sharing ``local``."""
        inv = Invocation(
            instance=self.instance,
            target=self.target,
            descriptor=self.descriptor,
            args=args,
            kwargs=kwargs,
            proceed=proceed,
        )
        inv.local = self.local
        return inv

    def __repr__(self) -> str:
        return f"Invocation({self.descriptor}, args={self.args!r}, kwargs={self.kwargs!r})"


async def completed(value: Any) -> Any:
    """Awaitable resolving to *value*; stands in for an ``async def`` result."""
    return value


async def failed(error: Any) -> Any:
    """Awaitable raising *error* when awaited."""
    raise error
