"""
Conversion of amoCRM web UI list URLs into API list filters

    from amocrm_sdk.utils.urlfilters import LeadFilter, parse_url

    lead_filter = LeadFilter.from_url(
        "https://example.amocrm.ru/leads/list/?filter[name]=Test&page=2"
    )
    leads = await client.get_leads(
        page=lead_filter.page_int,
        limit=lead_filter.limit_int,
        filter_params=lead_filter.get_sdk_filter_map()
    )
"""

from .errors import (
    ParseError,
    InvalidURLError,
    UnknownEntityError,
    WrongEntityError,
    InternalMismatchError,
    InvalidPaginationError,
)
from .url_filters import (
    ENTITY_TYPE_MAP,
    FilterDescriptor,
    extract_entity_type,
    parse_url,
)
from .entity_filters import (
    ENTITY_ALIASES,
    EntityFilter,
    LeadFilter,
    ContactFilter,
    CompanyFilter,
    CustomerFilter,
    CatalogFilter,
    TaskFilter,
    as_filter_map,
    filter_from_url,
    for_entity,
    parse_lead_url,
    resolve_entity,
)

__all__ = [
    "ParseError",
    "InvalidURLError",
    "UnknownEntityError",
    "WrongEntityError",
    "InternalMismatchError",
    "InvalidPaginationError",
    "ENTITY_TYPE_MAP",
    "FilterDescriptor",
    "extract_entity_type",
    "parse_url",
    "ENTITY_ALIASES",
    "EntityFilter",
    "LeadFilter",
    "ContactFilter",
    "CompanyFilter",
    "CustomerFilter",
    "CatalogFilter",
    "TaskFilter",
    "as_filter_map",
    "filter_from_url",
    "for_entity",
    "parse_lead_url",
    "resolve_entity",
]
