"""Per-proxy settings.

:class:`ProxySettings` is an immutable bundle handed to :func:`~pico_aop.api.mock`,
:func:`~pico_aop.api.spy` and the proxy builder. Values can also be read from
environment variables with :meth:`ProxySettings.from_environ`.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from .defaults import default_value
from .descriptor import OperationDescriptor
from .exceptions import ConfigurationError

ENV_PREFIX: str = "PICO_AOP_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def default_answer(descriptor: OperationDescriptor) -> Any:
    """Answer an unhandled mock call with the default of its declared return type."""
    return default_value(descriptor.return_type)


@dataclass(frozen=True)
class ProxySettings:
    """Immutable settings of one surrogate.

    Attributes:
        name: Label used in the proxy repr and in log records.
        strict: If ``True``, a mock raises :class:`~pico_aop.exceptions.UnstubbedCallError`
            for calls matched by no stub or aspect instead of answering a default.
        default_answer: Produces the value of unhandled mock calls.
        logger: Logger for dispatch diagnostics; defaults to the module logger.
    """

    name: Optional[str] = None
    strict: bool = False
    default_answer: Callable[[OperationDescriptor], Any] = default_answer
    logger: Optional[logging.Logger] = None

    def with_overrides(self, **changes: Any) -> "ProxySettings":
        """Return a copy with *changes* applied.

        Raises:
            ConfigurationError: If a key is not a settings field.
        """
        known = {f.name for f in dataclasses.fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigurationError(f"Unknown proxy settings: {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None, prefix: str = ENV_PREFIX) -> "ProxySettings":
        """Build settings from ``<prefix>STRICT`` and ``<prefix>NAME``.

        Raises:
            ConfigurationError: If ``STRICT`` is not a recognised boolean.
        """
        env = os.environ if environ is None else environ
        raw = env.get(prefix + "STRICT", "").strip().lower()
        if raw in _TRUE:
            strict = True
        elif raw in _FALSE:
            strict = False
        else:
            raise ConfigurationError(f"Invalid boolean for {prefix}STRICT: {raw!r}")
        return cls(name=env.get(prefix + "NAME") or None, strict=strict)
