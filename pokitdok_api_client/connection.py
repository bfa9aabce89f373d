"""
Authenticated HTTP connection to the PokitDok platform.

:class:`PokitDokConnection` obtains access tokens with the OAuth2
client credentials grant, attaches them to outgoing requests and
recovers from an expired or revoked token by refreshing it and
replaying the request once.

Token lifecycle per scope::

    no token --authenticate--> token --401--> refresh --> token
                                              \\--401 again--> PokitDokUnauthorizedError

Responses other than 401 are handed back untouched, whatever their
status; interpreting the API's error payloads is left to the caller.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Mapping, Optional

import requests
from requests.auth import HTTPBasicAuth

from .config import ClientConfig, default_config
from .exceptions import (
    PokitDokAuthError,
    PokitDokConnectionError,
    PokitDokUnauthorizedError,
    PokitDokURLError,
)
from .tokens import DEFAULT_SCOPE, Token, TokenStore
from .urls import build_url, token_url

logger = logging.getLogger(__name__)

# Methods whose parameters travel in the query string rather than the body
QUERY_METHODS = {"GET", "DELETE"}


class PokitDokConnection:
    """Issue authenticated requests against the PokitDok API.

    Parameters
    ----------
    client_id : str
        Your PokitDok OAuth client identifier.
    client_secret : str
        Your PokitDok OAuth client secret.
    config : ClientConfig, optional
        API base, version, default headers and timeouts.  Defaults to
        :func:`~pokitdok_api_client.config.default_config`.
    session : requests.Session, optional
        Session used for every HTTP call.  When omitted the connection
        creates and owns one, closed by :meth:`close`.
    access_token : str, optional
        A previously issued token for the default scope.  It is used
        until the API rejects it.
    """

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        access_token: Optional[str] = None,
    ) -> None:
        if not client_id:
            raise ValueError("client_id must be provided")
        if not client_secret:
            raise ValueError("client_secret must be provided")

        self.client_id = client_id
        self.client_secret = client_secret
        self.config = config or default_config()
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.tokens = TokenStore()
        if access_token:
            self.tokens.set(Token(scope=DEFAULT_SCOPE, value=access_token))

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def _fetch_token(self, scope: str) -> Token:
        """Request a new access token for ``scope`` from the token endpoint.

        The client credentials are sent with HTTP Basic authentication.
        The default scope is requested by leaving ``scope`` out of the
        form body.
        """
        url = token_url(self.config.api_base)
        payload = {"grant_type": "client_credentials"}
        if scope != DEFAULT_SCOPE:
            payload["scope"] = scope
        headers = {
            key: value
            for key, value in self.config.default_headers.items()
            if key.lower() != "authorization"
        }
        logger.debug("Requesting access token for scope %r from %s", scope, url)
        try:
            response = self.session.post(
                url,
                data=payload,
                headers=headers,
                auth=HTTPBasicAuth(self.client_id, self.client_secret),
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise PokitDokConnectionError(f"Failed to connect to auth server: {exc}") from exc

        if not response.ok:
            raise PokitDokAuthError(
                f"Authentication failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return self._parse_token(scope, response)

    @staticmethod
    def _parse_token(scope: str, response: requests.Response) -> Token:
        """Turn a token endpoint response into a :class:`Token`.

        Deployments answer either with a JSON object carrying
        ``access_token`` (and possibly ``expires_in``) or with the bare
        token value.  Anything that is not such an object is used
        verbatim.
        """
        obtained_at = time.time()
        body = response.text.strip()
        try:
            token_info = json.loads(body)
        except ValueError:
            token_info = None

        expires_at = None
        if isinstance(token_info, dict):
            value = token_info.get("access_token")
            expires_in = token_info.get("expires_in")
            if isinstance(expires_in, (int, float)) and not isinstance(expires_in, bool):
                expires_at = obtained_at + float(expires_in)
        else:
            value = body

        if not value:
            raise PokitDokAuthError(
                "Authentication response did not contain an access token",
                status_code=response.status_code,
                body=response.text,
            )
        return Token(scope=scope, value=str(value), obtained_at=obtained_at, expires_at=expires_at)

    def authenticate(self, scope: str = DEFAULT_SCOPE) -> Token:
        """Fetch a new token for ``scope``, replacing any stored one."""
        return self.tokens.refresh(scope, self.tokens.get(scope), self._fetch_token)

    # ------------------------------------------------------------------
    # HTTP request helpers
    # ------------------------------------------------------------------
    def _headers(self, token: Token, headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
        req_headers = dict(self.config.default_headers)
        if headers:
            for key, value in headers.items():
                # The bearer token always comes from the token store
                if key.lower() == "authorization":
                    continue
                req_headers[key] = value
        req_headers["Authorization"] = f"Bearer {token.value}"
        return req_headers

    def _send(
        self,
        method: str,
        url: str,
        token: Token,
        body: Optional[Mapping[str, Any]],
        headers: Optional[Mapping[str, str]],
    ) -> requests.Response:
        logger.debug("%s %s (scope %r)", method, url, token.scope)
        try:
            response = self.session.request(
                method=method,
                url=url,
                json=body,
                headers=self._headers(token, headers),
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise PokitDokConnectionError(f"Failed to connect to {url}: {exc}") from exc
        logger.debug("%s %s returned %s", method, url, response.status_code)
        return response

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        scope: str = DEFAULT_SCOPE,
    ) -> str:
        """Perform an authenticated request and return the raw response body.

        Parameters
        ----------
        method : str
            ``"GET"``, ``"POST"``, ``"PUT"`` or ``"DELETE"``.
        path : str
            Endpoint path relative to ``/api/<version>/``.
        params : mapping, optional
            Query parameters for GET and DELETE, JSON body for POST and PUT.
        headers : mapping, optional
            Extra headers merged over the configured defaults.
        scope : str, optional
            OAuth2 scope the request needs.  A token issued for another
            scope is never used.

        Raises
        ------
        PokitDokURLError
            If the parameters cannot be encoded into the URL.
        PokitDokAuthError
            If the token endpoint rejects the credentials.
        PokitDokUnauthorizedError
            If the API answers 401 both before and after a token refresh.
        PokitDokConnectionError
            If the API cannot be reached.
        """
        method = method.upper()
        if method in QUERY_METHODS:
            url = build_url(self.config.api_base, path, params, api_version=self.config.api_version)
            body = None
        else:
            url = build_url(self.config.api_base, path, api_version=self.config.api_version)
            body = params
        if url is None:
            raise PokitDokURLError(f"Could not build a URL for {path!r} from the given parameters")

        token = self.tokens.obtain(scope, self._fetch_token)
        response = self._send(method, url, token, body, headers)
        if response.status_code != 401:
            return response.text

        logger.warning("%s %s was unauthorized, refreshing the %r token and retrying", method, url, scope)
        token = self.tokens.refresh(scope, token, self._fetch_token)
        response = self._send(method, url, token, body, headers)
        if response.status_code == 401:
            raise PokitDokUnauthorizedError(
                f"401 Unauthorized for {url} after refreshing the access token",
                status_code=response.status_code,
                body=response.text,
                url=url,
            )
        return response.text

    # ------------------------------------------------------------------
    # Public convenience methods
    # ------------------------------------------------------------------
    def get(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        scope: str = DEFAULT_SCOPE,
    ) -> str:
        """Perform a GET request.

        See :meth:`request` for full parameter documentation.
        """
        return self.request("GET", path, params, headers, scope)

    def post(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        scope: str = DEFAULT_SCOPE,
    ) -> str:
        """Perform a POST request.

        See :meth:`request` for full parameter documentation.
        """
        return self.request("POST", path, params, headers, scope)

    def put(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        scope: str = DEFAULT_SCOPE,
    ) -> str:
        """Perform a PUT request.

        See :meth:`request` for full parameter documentation.
        """
        return self.request("PUT", path, params, headers, scope)

    def delete(
        self,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        scope: str = DEFAULT_SCOPE,
    ) -> str:
        """Perform a DELETE request.

        See :meth:`request` for full parameter documentation.
        """
        return self.request("DELETE", path, params, headers, scope)

    def close(self) -> None:
        """Close the HTTP session if this connection created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "PokitDokConnection":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
