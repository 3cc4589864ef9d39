"""
AmoCRM API Client
Sends requests to the v4 REST API and unwraps _embedded envelopes
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any, Sequence

import httpx
import structlog

from ..config import get_settings
from ..utils.urlfilters import (
    EntityFilter,
    LeadFilter,
    filter_from_url,
    for_entity,
)

logger = structlog.get_logger("amocrm_sdk.amocrm.client")

# AmoCRM refuses larger pages
MAX_PAGE_LIMIT = 250


class AmoCRMError(Exception):
    """AmoCRM API error"""
    pass


class AmoCRMAPIError(AmoCRMError):
    """API responded with an error status"""

    def __init__(self, status_code: int, detail: Any = None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"AmoCRM API returned {status_code}: {detail}")


def _default_page_limit() -> int:
    return get_settings().default_page_limit


@dataclass
class ListOptions:
    """
    Query options for list endpoints.

    limit defaults to Settings.default_page_limit. page below 1 or limit
    outside 1..250 raises ValueError instead of being silently adjusted.
    """

    page: int = 1
    limit: int = field(default_factory=_default_page_limit)
    filters: Dict[str, Any] = field(default_factory=dict)
    with_: Sequence[str] = ()
    order: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if not 1 <= self.limit <= MAX_PAGE_LIMIT:
            raise ValueError(f"limit must be between 1 and {MAX_PAGE_LIMIT}, got {self.limit}")

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "page": self.page,
            "limit": self.limit,
        }
        if self.with_:
            params["with"] = ",".join(self.with_)
        for order_field, direction in self.order.items():
            params[f"order[{order_field}]"] = direction
        # Filter keys are already in filter[...] form
        params.update(self.filters)
        return params


class AmoCRMClient:
    """
    Asynchronous AmoCRM API client.

    The underlying httpx.AsyncClient is created on the first request and
    released by close(). Use the client as an async context manager, or
    call close() when done, so the connection pool is not leaked.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        access_token: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.amocrm_base_url).rstrip("/")
        self.access_token = access_token or settings.amocrm_access_token
        self.timeout = timeout or settings.request_timeout_seconds
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "AmoCRMClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    def _get_http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http

    def get_base_url(self) -> str:
        return self.base_url

    async def do_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict] = None,
        data: Optional[Any] = None
    ) -> Dict[str, Any]:
        """Make authenticated request to AmoCRM API"""
        if not self.access_token:
            raise AmoCRMError("No access token available")

        url = f"{self.base_url}/api/v4/{endpoint}"
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json"
        }

        try:
            response = await self._get_http().request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=data
            )
        except httpx.HTTPError as e:
            logger.error(f"AmoCRM API error: {e}", method=method, endpoint=endpoint)
            raise AmoCRMError(f"API request failed: {e}") from e

        logger.info(
            "AmoCRM API request",
            method=method,
            endpoint=endpoint,
            status_code=response.status_code
        )

        if response.is_error:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            logger.error(
                "AmoCRM API returned error",
                endpoint=endpoint,
                status_code=response.status_code
            )
            raise AmoCRMAPIError(response.status_code, detail)

        # Empty list responses come back as 204 without body
        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise AmoCRMError(f"Invalid JSON in response from {endpoint}") from e

    async def list_entities(
        self,
        entity_type: str,
        options: Optional[ListOptions] = None
    ) -> List[Dict[str, Any]]:
        """Get one page of entities, unwrapped from _embedded"""
        options = options or ListOptions()
        result = await self.do_request("GET", entity_type, params=options.to_params())
        return result.get("_embedded", {}).get(entity_type, [])

    async def _list(
        self,
        entity_type: str,
        page: int,
        limit: Optional[int],
        filter_params: Optional[Dict] = None,
        with_: Optional[Sequence[str]] = None
    ) -> List[Dict[str, Any]]:
        options = ListOptions(
            page=page,
            limit=limit if limit is not None else _default_page_limit(),
            filters=dict(filter_params or {}),
            with_=tuple(with_ or ())
        )
        return await self.list_entities(entity_type, options)

    async def get_leads(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        filter_params: Optional[Dict] = None,
        with_: Optional[Sequence[str]] = None
    ) -> List[Dict[str, Any]]:
        """Get leads from AmoCRM"""
        return await self._list("leads", page, limit, filter_params, with_)

    async def get_contacts(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        filter_params: Optional[Dict] = None,
        with_: Optional[Sequence[str]] = None
    ) -> List[Dict[str, Any]]:
        """Get contacts from AmoCRM"""
        return await self._list("contacts", page, limit, filter_params, with_)

    async def get_companies(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        filter_params: Optional[Dict] = None,
        with_: Optional[Sequence[str]] = None
    ) -> List[Dict[str, Any]]:
        return await self._list("companies", page, limit, filter_params, with_)

    async def get_customers(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        filter_params: Optional[Dict] = None,
        with_: Optional[Sequence[str]] = None
    ) -> List[Dict[str, Any]]:
        return await self._list("customers", page, limit, filter_params, with_)

    async def get_tasks(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        filter_params: Optional[Dict] = None,
        with_: Optional[Sequence[str]] = None
    ) -> List[Dict[str, Any]]:
        return await self._list("tasks", page, limit, filter_params, with_)

    async def get_catalogs(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        filter_params: Optional[Dict] = None,
        with_: Optional[Sequence[str]] = None
    ) -> List[Dict[str, Any]]:
        return await self._list("catalogs", page, limit, filter_params, with_)

    async def get_lead(
        self,
        lead_id: int,
        with_: Optional[Sequence[str]] = None
    ) -> Dict[str, Any]:
        """Get lead information"""
        params = {"with": ",".join(with_)} if with_ else None
        return await self.do_request("GET", f"leads/{lead_id}", params=params)

    async def list_from_url(
        self,
        raw_url: str,
        expected_entity: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Run the list request behind a web UI list URL.

        With expected_entity the URL must belong to that entity,
        otherwise the entity type is taken from the URL itself.
        """
        if expected_entity:
            entity_filter = for_entity(raw_url, expected_entity)
        else:
            entity_filter = filter_from_url(raw_url)
        return await self._list_filtered(entity_filter)

    async def get_leads_from_url(self, raw_url: str) -> List[Dict[str, Any]]:
        """Get leads matching a web UI leads list URL"""
        return await self._list_filtered(LeadFilter.from_url(raw_url))

    async def _list_filtered(self, entity_filter: EntityFilter) -> List[Dict[str, Any]]:
        logger.info(
            "Listing entities from URL filter",
            entity_type=entity_filter.entity_type,
            page=entity_filter.page_int,
            limit=entity_filter.limit_int
        )
        return await self._list(
            entity_filter.entity_type,
            entity_filter.page_int,
            entity_filter.limit_int,
            entity_filter.get_sdk_filter_map()
        )

    async def test_connection(self) -> bool:
        """Test AmoCRM connection"""
        try:
            await self.do_request("GET", "account")
            return True
        except AmoCRMError:
            return False
