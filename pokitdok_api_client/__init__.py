"""
Python client for the PokitDok platform API.

This package provides a :class:`PokitDokClient` class that handles
OAuth2 client-credentials authentication against the PokitDok token
endpoint and exposes the platform's endpoints (eligibility, claims,
providers, pricing, scheduling, identity, pharmacy, ...) as methods
returning parsed JSON.

Access tokens are kept per OAuth2 scope.  When the API rejects a
token with 401 the client fetches a new one and replays the request
once; a second 401 raises :class:`PokitDokUnauthorizedError`.

Examples
--------

```python
from pokitdok_api_client import PokitDokClient

client = PokitDokClient(
    client_id="YOUR_CLIENT_ID",
    client_secret="YOUR_CLIENT_SECRET",
)

# Search for providers
providers = client.providers(last_name="Aya-ay")

# List a user's appointments (uses the user_schedule scope)
appointments = client.appointments()
```

Log output goes to the ``pokitdok_api_client`` logger hierarchy; the
package does not configure any handlers.
"""

from .client import PokitDokClient, parse_response
from .config import ClientConfig, __version__, default_config
from .connection import PokitDokConnection
from .exceptions import (
    PokitDokAuthError,
    PokitDokConnectionError,
    PokitDokError,
    PokitDokParseError,
    PokitDokUnauthorizedError,
    PokitDokURLError,
)
from .tokens import DEFAULT_SCOPE, USER_SCHEDULE_SCOPE, Token, TokenStore
from .urls import API_VERSION, build_url

__all__ = [
    "PokitDokClient",
    "PokitDokConnection",
    "ClientConfig",
    "default_config",
    "parse_response",
    "build_url",
    "Token",
    "TokenStore",
    "API_VERSION",
    "DEFAULT_SCOPE",
    "USER_SCHEDULE_SCOPE",
    "PokitDokError",
    "PokitDokAuthError",
    "PokitDokUnauthorizedError",
    "PokitDokParseError",
    "PokitDokConnectionError",
    "PokitDokURLError",
    "__version__",
]
