"""Per-proxy dispatch: the record/arm state machine and chain execution.

Every call received by a surrogate lands in :meth:`DispatchController.invoke`.
In ``NORMAL`` mode the controller selects the matching aspects, folds their
advice around the real method and runs the chain once. In ``RECORDING`` mode
the call is not executed: its descriptor is captured as the pending selector,
handed to the waiting capture hook, and the declared default is returned.

A controller is not thread-safe. Registration and dispatch are expected to
happen on one thread at a time per proxy; callers sharing a proxy across
threads must synchronise externally.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ._state import claim_expectation
from .advice import Advice
from .aspect import Aspect
from .config import ProxySettings
from .defaults import default_value
from .descriptor import OperationDescriptor
from .exceptions import RecordingStateError, UnstubbedCallError
from .invocation import Invocation, Proceed, completed
from .pointcut import Pointcut

_logger = logging.getLogger(__name__)

CaptureHook = Callable[[OperationDescriptor], None]


class DispatchMode(Enum):
    NORMAL = "normal"
    RECORDING = "recording"


class DispatchController:
    """Runtime state of one surrogate.

    Args:
        owner: The proxied type.
        target: The wrapped real object, or ``None`` for a mock.
        settings: The :class:`ProxySettings` of the surrogate.

    Attributes:
        mode: Current :class:`DispatchMode`.
        pending_selector: Descriptor captured by the recording call; only set
            while the capture hook runs.
    """

    def __init__(self, owner: type, *, target: Any = None, settings: Optional[ProxySettings] = None):
        self.owner = owner
        self.target = target
        self.settings = settings or ProxySettings()
        self.mode = DispatchMode.NORMAL
        self.pending_selector: Optional[OperationDescriptor] = None
        self._on_capture: Optional[CaptureHook] = None
        self._aspects: List[Aspect] = []
        self._stubs: Dict[OperationDescriptor, List[Aspect]] = {}
        self._logger = self.settings.logger or _logger

    # -- registration ------------------------------------------------------

    @property
    def aspects(self) -> Tuple[Aspect, ...]:
        return tuple(self._aspects)

    @property
    def is_recording(self) -> bool:
        return self.mode is DispatchMode.RECORDING

    def add_aspect(self, aspect: Aspect) -> Aspect:
        """Register *aspect* after the existing ones and freeze its pointcut."""
        aspect.pointcut.freeze()
        self._aspects.append(aspect)
        self._logger.debug("Aspect %s registered on %s (%d advice)", aspect.name or "<anonymous>", self._label(), len(aspect.advices))
        return aspect

    def add_stub(self, descriptor: OperationDescriptor, *advices: Advice) -> Aspect:
        """Register a single-operation stub; it shadows earlier stubs for *descriptor*."""
        stub = Aspect.of(Pointcut.exact(descriptor).freeze(), *advices, name=f"stub:{descriptor.name}")
        stack = self._stubs.setdefault(descriptor, [])
        if stack:
            self._logger.debug("Stub for %s shadows %d earlier stub(s)", descriptor, len(stack))
        stack.append(stub)
        self._logger.debug("Stub armed on %s for %s", self._label(), descriptor)
        return stub

    def stubs_for(self, descriptor: OperationDescriptor) -> Tuple[Aspect, ...]:
        """All stubs registered for *descriptor*, oldest first."""
        return tuple(self._stubs.get(descriptor, ()))

    def reset_stubs(self) -> None:
        self._stubs.clear()
        self._logger.debug("Stubs cleared on %s", self._label())

    # -- recording ---------------------------------------------------------

    def begin_recording(self, on_capture: CaptureHook) -> None:
        """Capture the next incoming call and pass its descriptor to *on_capture*.

        Raises:
            RecordingStateError: If a recording request is already pending.
        """
        if self.mode is DispatchMode.RECORDING:
            raise RecordingStateError(self.owner)
        self.mode = DispatchMode.RECORDING
        self._on_capture = on_capture
        self._logger.debug("%s entered recording mode", self._label())

    def _record(self, descriptor: OperationDescriptor) -> Any:
        hook = self._on_capture
        self.pending_selector = descriptor
        try:
            if hook is not None:
                hook(descriptor)
        finally:
            self.pending_selector = None
            self._on_capture = None
            self.mode = DispatchMode.NORMAL
            self._logger.debug("%s captured selector %s", self._label(), descriptor)
        # The caller discards this value, so it is never wrapped for async
        # operations and must never fail.
        return default_value(descriptor.return_type)

    # -- dispatch ----------------------------------------------------------

    def matching_aspects(self, descriptor: OperationDescriptor) -> List[Aspect]:
        """Aspects matching *descriptor* in registration order, then the latest stub."""
        matched = [a for a in self._aspects if a.matches(descriptor)]
        stack = self._stubs.get(descriptor)
        if stack and stack[-1].matches(descriptor):
            matched.append(stack[-1])
        return matched

    def invoke(
        self,
        instance: Any,
        descriptor: OperationDescriptor,
        args: tuple,
        kwargs: dict,
        real: Optional[Callable[..., Any]] = None,
    ) -> Any:
        """Handle one call received by the surrogate.

        Args:
            instance: The surrogate.
            descriptor: Identity of the called operation.
            args: Positional arguments.
            kwargs: Keyword arguments.
            real: The real bound method, or ``None`` when there is no target.

        Returns:
            The result of the chain, or of the real method / default answer
            when no aspect matches.
        """
        expectation = claim_expectation()
        if expectation is not None:
            expectation.controller = self

            def capture(d: OperationDescriptor) -> None:
                expectation.selector = d

            self.begin_recording(capture)

        if self.mode is DispatchMode.RECORDING:
            return self._record(descriptor)

        terminal = self._terminal(descriptor, real)
        aspects = self.matching_aspects(descriptor)
        if not aspects:
            if real is None and self.settings.strict:
                raise UnstubbedCallError(descriptor)
            return terminal(tuple(args), dict(kwargs))

        root = Invocation(
            instance=instance,
            target=self.target,
            descriptor=descriptor,
            args=args,
            kwargs=kwargs,
            proceed=terminal,
        )
        advices = [a for aspect in aspects for a in aspect.advices]
        chain = terminal
        for advice in reversed(advices):
            chain = _link(advice, chain, root)
        return chain(root.args, root.kwargs)

    def _terminal(self, descriptor: OperationDescriptor, real: Optional[Callable[..., Any]]) -> Proceed:
        if real is not None:
            return lambda a, k: real(*a, **k)
        answer = self.settings.default_answer
        if descriptor.is_coroutine:
            return lambda a, k: completed(answer(descriptor))
        return lambda a, k: answer(descriptor)

    def _label(self) -> str:
        return self.settings.name or f"proxy of {self.owner.__qualname__}"


def _link(advice: Advice, proceed: Proceed, root: Invocation) -> Proceed:
    def call(args: tuple, kwargs: dict) -> Any:
        return advice(root.derive(args, kwargs, proceed))

    return call
