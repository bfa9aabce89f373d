"""
Client implementation for the PokitDok platform API.

This module defines the :class:`PokitDokClient` class, which exposes
one method per API endpoint.  Each method maps onto a GET, POST, PUT
or DELETE against a fixed path, sends it through a
:class:`~pokitdok_api_client.connection.PokitDokConnection` and parses
the JSON response.

Usage
-----

.. code-block:: python

    from pokitdok_api_client import PokitDokClient

    client = PokitDokClient(client_id="abc123", client_secret="shhsecret")

    # Search providers by name
    providers = client.providers(last_name="Aya-ay", zipcode=94401)
    for provider in providers.get("data", []):
        print(provider["provider"]["npi"])

    # Check eligibility
    eligibility = client.eligibility({
        "member": {"id": "W000000000", "first_name": "Jane", "last_name": "Doe"},
        "trading_partner_id": "MOCKPAYER",
    })

Responses are returned as plain Python structures (dicts, lists,
strings, numbers, booleans or ``None``) exactly as the API sent them.
Error responses other than 401 are returned the same way; the API
describes errors in the payload and the client does not second-guess
it.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import requests

from .config import UNSET, ClientConfig, default_config
from .connection import PokitDokConnection
from .exceptions import PokitDokParseError
from .tokens import DEFAULT_SCOPE, USER_SCHEDULE_SCOPE

logger = logging.getLogger(__name__)

Params = Optional[Mapping[str, Any]]
Headers = Optional[Mapping[str, str]]


def parse_response(body: str) -> Any:
    """Decode a JSON response body.

    Raises
    ------
    PokitDokParseError
        If ``body`` is empty or not valid JSON.
    """
    try:
        return json.loads(body)
    except ValueError as exc:
        logger.debug("Could not decode response body of %d characters", len(body))
        raise PokitDokParseError(f"Response body is not valid JSON: {exc}", body=body) from exc


def _merge(params: Params, extra: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(params or {})
    merged.update(extra)
    return merged


def _resource_path(collection: str, item: str, params: Dict[str, Any], key: str, identifier: Any = None) -> str:
    """Pick the item path when an identifier is given, else the collection path.

    The identifier may be passed directly or inside ``params`` under
    ``key``; either way ``key`` is removed from ``params``.
    """
    from_params = params.pop(key, None)
    if identifier is None:
        identifier = from_params
    if identifier is None or identifier == "":
        return collection
    return item.format(quote(str(identifier), safe=""))


def _segment(name: str, identifier: Any) -> str:
    """Encode a required identifier as a single path segment."""
    if identifier is None or identifier == "":
        raise ValueError(f"{name} must be provided")
    return quote(str(identifier), safe="")


class PokitDokClient:
    """A client for the PokitDok platform API.

    Parameters
    ----------
    client_id : str
        Your PokitDok OAuth client identifier.
    client_secret : str
        Your PokitDok OAuth client secret.
    api_base : str, optional
        Override the API base URL of the default configuration.
    headers : mapping, optional
        Extra headers sent with every request, merged over the
        default ``User-Agent``.
    connect_timeout, read_timeout : float or None, optional
        Override the transport timeouts, in seconds.  Pass ``None`` to
        wait indefinitely; leave unset to keep the configured value.
    config : ClientConfig, optional
        Start from this configuration instead of the process default.
    session : requests.Session, optional
        Session to send requests through.
    access_token : str, optional
        A previously issued default-scope token to start with.
    """

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        api_base: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        connect_timeout: Any = UNSET,
        read_timeout: Any = UNSET,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        access_token: Optional[str] = None,
    ) -> None:
        config = (config or default_config()).replace(
            api_base=api_base,
            headers=headers,
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
        )
        self.connection = PokitDokConnection(
            client_id=client_id,
            client_secret=client_secret,
            config=config,
            session=session,
            access_token=access_token,
        )

    @property
    def config(self) -> ClientConfig:
        return self.connection.config

    # ------------------------------------------------------------------
    # Generic requests
    # ------------------------------------------------------------------
    def request(
        self, method: str, path: str, params: Params = None, headers: Headers = None, scope: str = DEFAULT_SCOPE
    ) -> Any:
        """Send a request through the connection and parse the JSON reply."""
        return parse_response(self.connection.request(method, path, params, headers, scope))

    def get(self, path: str, params: Params = None, *, headers: Headers = None, scope: str = DEFAULT_SCOPE) -> Any:
        """Perform a GET request and parse the JSON reply.

        See :meth:`PokitDokConnection.request` for full parameter documentation.
        """
        return self.request("GET", path, params, headers, scope)

    def post(self, path: str, params: Params = None, *, headers: Headers = None, scope: str = DEFAULT_SCOPE) -> Any:
        """Perform a POST request and parse the JSON reply.

        See :meth:`PokitDokConnection.request` for full parameter documentation.
        """
        return self.request("POST", path, params, headers, scope)

    def put(self, path: str, params: Params = None, *, headers: Headers = None, scope: str = DEFAULT_SCOPE) -> Any:
        """Perform a PUT request and parse the JSON reply.

        See :meth:`PokitDokConnection.request` for full parameter documentation.
        """
        return self.request("PUT", path, params, headers, scope)

    def delete(self, path: str, params: Params = None, *, headers: Headers = None, scope: str = DEFAULT_SCOPE) -> Any:
        """Perform a DELETE request and parse the JSON reply.

        See :meth:`PokitDokConnection.request` for full parameter documentation.
        """
        return self.request("DELETE", path, params, headers, scope)

    # ------------------------------------------------------------------
    # Pricing, activities and reference data
    # ------------------------------------------------------------------
    def activities(self, params: Params = None, **kwargs: Any) -> Any:
        """Invoke the activities endpoint."""
        return self.get("activities", _merge(params, kwargs))

    def cash_prices(self, params: Params = None, **kwargs: Any) -> Any:
        """Invoke the cash prices endpoint."""
        return self.get("prices/cash", _merge(params, kwargs))

    def insurance_prices(self, params: Params = None, **kwargs: Any) -> Any:
        """Invoke the insurance prices endpoint."""
        return self.get("prices/insurance", _merge(params, kwargs))

    def payers(self, params: Params = None, **kwargs: Any) -> Any:
        return self.get("payers", _merge(params, kwargs))

    def providers(self, params: Params = None, **kwargs: Any) -> Any:
        """Search providers, e.g. ``providers(last_name="Aya-ay")``."""
        return self.get("providers", _merge(params, kwargs))

    def plans(self, params: Params = None, **kwargs: Any) -> Any:
        return self.get("plans", _merge(params, kwargs))

    def trading_partners(self, params: Params = None, *, trading_partner_id: Optional[str] = None, **kwargs: Any) -> Any:
        """List trading partners, or fetch one by ``trading_partner_id``."""
        merged = _merge(params, kwargs)
        path = _resource_path("tradingpartners/", "tradingpartners/{}", merged, "trading_partner_id", trading_partner_id)
        return self.get(path, merged)

    def mpc(self, params: Params = None, *, code: Optional[str] = None, **kwargs: Any) -> Any:
        """Search medical procedure codes, or fetch one by ``code``."""
        merged = _merge(params, kwargs)
        return self.get(_resource_path("mpc/", "mpc/{}", merged, "code", code), merged)

    # ------------------------------------------------------------------
    # X12 transactions
    # ------------------------------------------------------------------
    def claims(self, params: Params = None, **kwargs: Any) -> Any:
        """Submit a claim."""
        return self.post("claims/", _merge(params, kwargs))

    def claims_status(self, params: Params = None, **kwargs: Any) -> Any:
        """Query the status of a previously submitted claim."""
        return self.post("claims/status", _merge(params, kwargs))

    def eligibility(self, params: Params = None, **kwargs: Any) -> Any:
        """Check a member's eligibility with a trading partner."""
        return self.post("eligibility/", _merge(params, kwargs))

    def enrollment(self, params: Params = None, **kwargs: Any) -> Any:
        return self.post("enrollment", _merge(params, kwargs))

    def authorizations(self, params: Params = None, **kwargs: Any) -> Any:
        return self.post("authorizations/", _merge(params, kwargs))

    def referrals(self, params: Params = None, **kwargs: Any) -> Any:
        return self.post("referrals/", _merge(params, kwargs))

    # ------------------------------------------------------------------
    # Scheduling
    #
    # Reading and changing appointments needs a token for the user
    # schedule scope; appointment types and schedulers do not.
    # ------------------------------------------------------------------
    def appointments(self, params: Params = None, *, appointment_uuid: Optional[str] = None, **kwargs: Any) -> Any:
        """List appointments, or fetch one by ``appointment_uuid``."""
        merged = _merge(params, kwargs)
        path = _resource_path("appointments/", "appointments/{}", merged, "appointment_uuid", appointment_uuid)
        return self.get(path, merged, scope=USER_SCHEDULE_SCOPE)

    def appointment(self, appointment_uuid: str, params: Params = None, **kwargs: Any) -> Any:
        """Fetch a single appointment."""
        _segment("appointment_uuid", appointment_uuid)
        return self.appointments(params, appointment_uuid=appointment_uuid, **kwargs)

    def book_appointment(self, appointment_uuid: str, params: Params = None, **kwargs: Any) -> Any:
        """Book an open appointment slot for a patient."""
        path = "appointments/" + _segment("appointment_uuid", appointment_uuid)
        return self.put(path, _merge(params, kwargs), scope=USER_SCHEDULE_SCOPE)

    def update_appointment(self, appointment_uuid: str, params: Params = None, **kwargs: Any) -> Any:
        path = "appointments/" + _segment("appointment_uuid", appointment_uuid)
        return self.put(path, _merge(params, kwargs), scope=USER_SCHEDULE_SCOPE)

    def cancel_appointment(self, appointment_uuid: str, params: Params = None, **kwargs: Any) -> Any:
        path = "appointments/" + _segment("appointment_uuid", appointment_uuid)
        return self.delete(path, _merge(params, kwargs), scope=USER_SCHEDULE_SCOPE)

    def appointment_types(self, params: Params = None, *, appointment_type_uuid: Optional[str] = None, **kwargs: Any) -> Any:
        merged = _merge(params, kwargs)
        path = _resource_path(
            "appointment_types/", "appointment_types/{}", merged, "appointment_type_uuid", appointment_type_uuid
        )
        return self.get(path, merged)

    def appointment_type(self, appointment_type_uuid: str) -> Any:
        _segment("appointment_type_uuid", appointment_type_uuid)
        return self.appointment_types(appointment_type_uuid=appointment_type_uuid)

    def schedulers(self, params: Params = None, *, scheduler_uuid: Optional[str] = None, **kwargs: Any) -> Any:
        merged = _merge(params, kwargs)
        path = _resource_path("schedulers/", "schedulers/{}", merged, "scheduler_uuid", scheduler_uuid)
        return self.get(path, merged)

    def scheduler(self, scheduler_uuid: str) -> Any:
        _segment("scheduler_uuid", scheduler_uuid)
        return self.schedulers(scheduler_uuid=scheduler_uuid)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------
    def identity(self, params: Params = None, *, uuid: Optional[str] = None, **kwargs: Any) -> Any:
        """Search identities, or fetch one by ``uuid``."""
        merged = _merge(params, kwargs)
        return self.get(_resource_path("identity", "identity/{}", merged, "uuid", uuid), merged)

    def create_identity(self, params: Params = None, **kwargs: Any) -> Any:
        return self.post("identity", _merge(params, kwargs))

    def update_identity(self, uuid: str, params: Params = None, **kwargs: Any) -> Any:
        return self.put("identity/" + _segment("uuid", uuid), _merge(params, kwargs))

    # ------------------------------------------------------------------
    # Pharmacy
    # ------------------------------------------------------------------
    def pharmacy_plans(self, params: Params = None, **kwargs: Any) -> Any:
        return self.get("pharmacy/plans", _merge(params, kwargs))

    def pharmacy_formulary(self, params: Params = None, **kwargs: Any) -> Any:
        return self.get("pharmacy/formulary", _merge(params, kwargs))

    def pharmacy_network(self, params: Params = None, *, npi: Optional[str] = None, **kwargs: Any) -> Any:
        """Search in-network pharmacies, or fetch one by ``npi``."""
        merged = _merge(params, kwargs)
        return self.get(_resource_path("pharmacy/network", "pharmacy/network/{}", merged, "npi", npi), merged)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "PokitDokClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
