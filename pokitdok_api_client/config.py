"""
Client configuration.

A :class:`ClientConfig` holds everything about *where* and *how* the
client talks to the API that is not a credential: the API base URL,
the API version, the headers sent with every request and the
transport timeouts.  :func:`default_config` returns the process-wide
defaults; individual clients derive their own copy with
:meth:`ClientConfig.replace` and never modify the shared one.
"""

from __future__ import annotations

import dataclasses
import platform
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

import requests

from .urls import API_VERSION

__version__ = "0.1.0"

DEFAULT_API_BASE = "https://platform.pokitdok.com"
DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_READ_TIMEOUT = 60.0

# Marks an override that was not given, so that None can mean "no timeout"
UNSET: Any = object()


def user_agent() -> str:
    """Identify the library and runtime to the API."""
    return "pokitdok-python/%s python/%s requests/%s" % (
        __version__,
        platform.python_version(),
        requests.__version__,
    )


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings shared by every request a client makes.

    Parameters
    ----------
    api_base : str
        Scheme and host of the API, e.g. ``"https://platform.pokitdok.com"``.
        Trailing slashes are removed.
    api_version : str
        Version segment inserted after ``/api/``.
    default_headers : mapping
        Headers merged into every resource request.  Caller supplied
        headers take precedence, except for ``Authorization``.
    connect_timeout, read_timeout : float, optional
        Passed to :mod:`requests` as the ``(connect, read)`` timeout
        pair.  ``None`` waits indefinitely.
    """

    api_base: str = DEFAULT_API_BASE
    api_version: str = API_VERSION
    default_headers: Mapping[str, str] = field(default_factory=dict)
    connect_timeout: Optional[float] = DEFAULT_CONNECT_TIMEOUT
    read_timeout: Optional[float] = DEFAULT_READ_TIMEOUT

    def __post_init__(self) -> None:
        if not self.api_base:
            raise ValueError("api_base must be provided")
        object.__setattr__(self, "api_base", self.api_base.rstrip("/"))
        # Freeze the headers so a shared config cannot be altered in place
        object.__setattr__(self, "default_headers", MappingProxyType(dict(self.default_headers)))

    @property
    def timeout(self) -> Tuple[Optional[float], Optional[float]]:
        return (self.connect_timeout, self.read_timeout)

    def replace(self, **overrides: Any) -> "ClientConfig":
        """Return a copy of this config with ``overrides`` applied.

        Overrides equal to :data:`UNSET` are ignored so that optional
        constructor arguments can be passed straight through.  A
        ``None`` timeout is applied as given and disables that timeout;
        ``None`` for ``api_base`` or ``headers`` keeps the current value.
        A ``headers`` override is merged over the existing default headers.
        """
        changes = {key: value for key, value in overrides.items() if value is not UNSET}
        if changes.get("api_base", UNSET) is None:
            del changes["api_base"]
        headers = changes.pop("headers", None)
        if headers:
            merged = dict(self.default_headers)
            merged.update(headers)
            changes["default_headers"] = merged
        return dataclasses.replace(self, **changes)


@lru_cache(maxsize=None)
def default_config() -> ClientConfig:
    """Return the process-wide default configuration, built on first use."""
    return ClientConfig(default_headers={"User-Agent": user_agent()})
