"""
URL construction helpers.

Resource URLs follow the form::

    <api_base>/api/<version>/<endpoint>[?<query>]

and the OAuth2 token endpoint lives at ``<api_base>/oauth2/token``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

API_VERSION = "v4"


def build_url(
    api_base: str,
    endpoint: str,
    params: Optional[Mapping[str, Any]] = None,
    *,
    api_version: str = API_VERSION,
) -> Optional[str]:
    """Compose a resource URL from its parts.

    Parameter values are coerced to ``str`` before encoding and ``None``
    values are left out.  Nested values are not serialised specially,
    so a dict or list ends up as its ``str()`` form.

    Returns ``None`` when a key or value cannot be encoded; callers
    must treat that as a failure to build the request.

    >>> build_url("https://platform.pokitdok.com", "providers", {"last_name": "Aya-ay"})
    'https://platform.pokitdok.com/api/v4/providers?last_name=Aya-ay'
    """
    url = f"{api_base.rstrip('/')}/api/{api_version}/{endpoint.lstrip('/')}"
    if not params:
        return url
    query = [(str(key), str(value)) for key, value in params.items() if value is not None]
    if not query:
        return url
    try:
        encoded = urlencode(query)
    except UnicodeEncodeError as exc:
        logger.debug("Could not encode query parameters for %s: %s", url, exc)
        return None
    return f"{url}?{encoded}"


def token_url(api_base: str) -> str:
    """Return the OAuth2 token endpoint for ``api_base``."""
    return f"{api_base.rstrip('/')}/oauth2/token"
