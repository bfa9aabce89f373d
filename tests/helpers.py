"""Shared constants and helpers for the mocked API."""

import responses

API_BASE = "https://api.test"
TOKEN_URL = f"{API_BASE}/oauth2/token"
CLIENT_ID = "client-id"
CLIENT_SECRET = "client-secret"


def api_url(path):
    return f"{API_BASE}/api/v4/{path}"


def add_tokens(rsps, *values, status=200):
    """Queue token endpoint responses, handed out in order."""
    for value in values:
        rsps.add(responses.POST, TOKEN_URL, body=value, status=status)


def token_calls(rsps):
    return [call for call in rsps.calls if call.request.url == TOKEN_URL]


def api_calls(rsps):
    return [call for call in rsps.calls if call.request.url != TOKEN_URL]
