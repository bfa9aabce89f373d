from pokitdok_api_client.urls import build_url, token_url

BASE = "https://platform.pokitdok.com"


def test_build_url_without_params():
    assert build_url(BASE, "providers", {}) == f"{BASE}/api/v4/providers"
    assert build_url(BASE, "providers") == f"{BASE}/api/v4/providers"


def test_build_url_with_params():
    url = build_url(BASE, "providers", {"last_name": "Aya-ay"})
    assert url == f"{BASE}/api/v4/providers?last_name=Aya-ay"


def test_build_url_encodes_reserved_characters():
    url = build_url(BASE, "providers", {"name": "a b&c"})
    assert url == f"{BASE}/api/v4/providers?name=a+b%26c"


def test_build_url_coerces_values_to_strings():
    url = build_url(BASE, "providers", {"zipcode": 94401, "radius": 1.5, "active": True})
    assert url == f"{BASE}/api/v4/providers?zipcode=94401&radius=1.5&active=True"


def test_build_url_skips_none_values():
    assert build_url(BASE, "providers", {"last_name": None}) == f"{BASE}/api/v4/providers"
    assert build_url(BASE, "providers", {"a": None, "b": 1}) == f"{BASE}/api/v4/providers?b=1"


def test_build_url_normalises_slashes():
    assert build_url(BASE + "/", "/claims/status") == f"{BASE}/api/v4/claims/status"
    assert build_url(BASE, "claims/") == f"{BASE}/api/v4/claims/"


def test_build_url_custom_version():
    assert build_url(BASE, "payers", api_version="v5") == f"{BASE}/api/v5/payers"


def test_build_url_returns_none_for_unencodable_value():
    assert build_url(BASE, "providers", {"last_name": "\ud800"}) is None


def test_token_url():
    assert token_url(BASE) == f"{BASE}/oauth2/token"
    assert token_url(BASE + "/") == f"{BASE}/oauth2/token"
