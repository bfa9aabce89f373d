import pytest
import responses

from pokitdok_api_client import ClientConfig, PokitDokClient, PokitDokConnection

from tests.helpers import API_BASE, CLIENT_ID, CLIENT_SECRET


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


@pytest.fixture
def config():
    return ClientConfig(api_base=API_BASE, default_headers={"User-Agent": "pokitdok-python/test"})


@pytest.fixture
def connection(config):
    conn = PokitDokConnection(client_id=CLIENT_ID, client_secret=CLIENT_SECRET, config=config)
    yield conn
    conn.close()


@pytest.fixture
def client():
    pd = PokitDokClient(client_id=CLIENT_ID, client_secret=CLIENT_SECRET, api_base=API_BASE)
    yield pd
    pd.close()
