"""
Web UI list URL parser
Converts amoCRM browser list-page URLs (/leads/list/?filter[...]=...)
into the filter parameters accepted by the REST API list endpoints
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, unquote, urlsplit

import structlog

from .errors import InvalidURLError, UnknownEntityError

logger = structlog.get_logger("amocrm_sdk.urlfilters")

DEFAULT_PAGE = "1"
DEFAULT_LIMIT = "50"
FILTER_PREFIX = "filter"

# Web UI route name -> API entity name. Currently identical for all
# supported entities, unknown names are passed through as is.
ENTITY_TYPE_MAP: Mapping[str, str] = MappingProxyType({
    "leads": "leads",
    "contacts": "contacts",
    "customers": "customers",
    "companies": "companies",
    "catalogs": "catalogs",
    "tasks": "tasks",
})

_LIST_ROUTE_RE = re.compile(r"/([a-z_]+)/list/?")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_BAD_NETLOC_CHARS_RE = re.compile(r"[\s<>\"{}|\\^`]")


@dataclass(frozen=True)
class FilterDescriptor:
    """Result of parsing one web UI list URL"""

    entity_type: str
    page: str = DEFAULT_PAGE
    limit: str = DEFAULT_LIMIT
    filters: Mapping[str, str] = field(default_factory=dict)
    raw_query: str = ""

    def __post_init__(self):
        if not isinstance(self.filters, MappingProxyType):
            object.__setattr__(self, "filters", MappingProxyType(dict(self.filters)))

    def __hash__(self):
        return hash((
            self.entity_type,
            self.page,
            self.limit,
            frozenset(self.filters.items()),
            self.raw_query,
        ))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entity_type": self.entity_type,
            "page": self.page,
            "limit": self.limit,
            "filters": dict(self.filters),
            "raw_query": self.raw_query,
        }


def split_url(raw_url: str) -> Tuple[str, str]:
    """
    Split URL into (decoded path, raw query).

    Raises InvalidURLError for strings that are not syntactically URLs.
    A bare string without scheme is a valid relative URL and becomes a path.
    """
    if _CONTROL_CHARS_RE.search(raw_url):
        raise InvalidURLError(raw_url, "control characters in URL")

    try:
        parts = urlsplit(raw_url)
        # Validates port: non-numeric or out of range raises
        parts.port
    except ValueError as e:
        raise InvalidURLError(raw_url, str(e)) from e

    if _BAD_NETLOC_CHARS_RE.search(parts.netloc):
        raise InvalidURLError(raw_url, f"invalid character in host {parts.netloc!r}")

    for component in (parts.path, parts.query):
        if _BAD_ESCAPE_RE.search(component):
            raise InvalidURLError(raw_url, f"invalid percent escape in {component!r}")

    return unquote(parts.path), parts.query


def extract_entity_type(path: str) -> str:
    """Find /<name>/list/ in path and map name to API entity type, "" if absent"""
    match = _LIST_ROUTE_RE.search(path)
    if not match:
        return ""

    name = match.group(1)
    return ENTITY_TYPE_MAP.get(name, name)


def _parse_query(query: str) -> List[Tuple[str, str]]:
    return parse_qsl(query, keep_blank_values=True)


def parse_url(raw_url: str) -> FilterDescriptor:
    """
    Parse amoCRM web UI list URL into FilterDescriptor.

    page/limit default to "1"/"50" and are not validated here.
    For repeated filter keys (filter[status][]=1&filter[status][]=2)
    only the first value is kept.
    """
    path, query = split_url(raw_url)

    entity_type = extract_entity_type(path)
    if not entity_type:
        logger.info("No entity list route in URL", path=path)
        raise UnknownEntityError(path)

    page: Optional[str] = None
    limit: Optional[str] = None
    filters: Dict[str, str] = {}

    for key, value in _parse_query(query):
        if key == "page" and page is None:
            page = value
        elif key == "limit" and limit is None:
            limit = value
        elif key.startswith(FILTER_PREFIX) and key not in filters:
            filters[key] = value

    descriptor = FilterDescriptor(
        entity_type=entity_type,
        page=page or DEFAULT_PAGE,
        limit=limit or DEFAULT_LIMIT,
        filters=filters,
        raw_query=query,
    )

    logger.debug(
        "Parsed list URL",
        entity_type=entity_type,
        page=descriptor.page,
        limit=descriptor.limit,
        filters_count=len(filters)
    )
    return descriptor
