"""
Entity-specific wrappers over the generic list URL parser
Check that a URL belongs to one entity and expose page/limit as integers
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import ClassVar, Dict, Mapping, Optional

import structlog

from .errors import InternalMismatchError, InvalidPaginationError, WrongEntityError
from .url_filters import ENTITY_TYPE_MAP, FilterDescriptor, parse_url, split_url

logger = structlog.get_logger("amocrm_sdk.urlfilters")

# Singular names accepted in place of API entity types
ENTITY_ALIASES: Mapping[str, str] = MappingProxyType({
    "lead": "leads",
    "contact": "contacts",
    "company": "companies",
    "customer": "customers",
    "catalog": "catalogs",
    "task": "tasks",
})

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def resolve_entity(name: str) -> str:
    """Map singular alias to API entity type"""
    return ENTITY_ALIASES.get(name, name)


def _list_route_pattern(entity_type: str) -> re.Pattern:
    url_names = [
        url_name for url_name, api_name in ENTITY_TYPE_MAP.items()
        if api_name == entity_type
    ] or [entity_type]
    alternatives = "|".join(re.escape(name) for name in url_names)
    return re.compile(rf"/(?:{alternatives})/list/?")


def _to_int(field: str, value: str) -> int:
    try:
        if not _INTEGER_RE.fullmatch(value):
            raise ValueError(f"invalid integer literal: {value!r}")
        return int(value)
    except ValueError as e:
        logger.info("Invalid pagination value", field=field, value=value)
        raise InvalidPaginationError(field, value) from e


def _parse_for_entity(raw_url: str, entity_type: str) -> FilterDescriptor:
    path, _ = split_url(raw_url)

    # Checked before the generic parser so a valid URL of another
    # entity never gets parsed at all
    if not _list_route_pattern(entity_type).search(path):
        logger.info("URL is not an entity list URL", expected=entity_type, path=path)
        raise WrongEntityError(entity_type, path)

    descriptor = parse_url(raw_url)

    if descriptor.entity_type != entity_type:
        logger.error(
            "Entity type mismatch between route check and parser",
            expected=entity_type,
            actual=descriptor.entity_type,
            path=path
        )
        raise InternalMismatchError(entity_type, descriptor.entity_type)

    return descriptor


@dataclass(frozen=True)
class EntityFilter:
    """Parsed list URL bound to one entity type, with integer pagination"""

    ENTITY: ClassVar[Optional[str]] = None

    descriptor: FilterDescriptor
    page_int: int
    limit_int: int

    @classmethod
    def from_url(cls, raw_url: str) -> "EntityFilter":
        if not cls.ENTITY:
            raise TypeError(f"{cls.__name__} is not bound to an entity type, use for_entity()")
        return for_entity(raw_url, cls.ENTITY)

    @property
    def entity_type(self) -> str:
        return self.descriptor.entity_type

    @property
    def page(self) -> str:
        return self.descriptor.page

    @property
    def limit(self) -> str:
        return self.descriptor.limit

    @property
    def filters(self) -> Mapping[str, str]:
        return self.descriptor.filters

    @property
    def raw_query(self) -> str:
        return self.descriptor.raw_query

    def get_sdk_filter_map(self) -> Dict[str, str]:
        """Filter map for the client list methods"""
        return dict(self.descriptor.filters)


class LeadFilter(EntityFilter):
    ENTITY = "leads"


class ContactFilter(EntityFilter):
    ENTITY = "contacts"


class CompanyFilter(EntityFilter):
    ENTITY = "companies"


class CustomerFilter(EntityFilter):
    ENTITY = "customers"


class CatalogFilter(EntityFilter):
    ENTITY = "catalogs"


class TaskFilter(EntityFilter):
    ENTITY = "tasks"


FILTER_CLASSES = MappingProxyType({
    cls.ENTITY: cls
    for cls in (LeadFilter, ContactFilter, CompanyFilter,
                CustomerFilter, CatalogFilter, TaskFilter)
})


def for_entity(raw_url: str, expected_entity: str) -> EntityFilter:
    """
    Parse list URL that must belong to expected_entity.

    expected_entity is an API entity type ("leads") or its singular alias ("lead").

    Raises:
        WrongEntityError: path is not a list route of expected_entity
        InternalMismatchError: generic parser resolved another entity
        InvalidPaginationError: page or limit is not an integer
    """
    entity_type = resolve_entity(expected_entity)
    return _bind(_parse_for_entity(raw_url, entity_type))


def filter_from_url(raw_url: str) -> EntityFilter:
    """Parse list URL of any entity, taking the entity type from the path"""
    return _bind(parse_url(raw_url))


def _bind(descriptor: FilterDescriptor) -> EntityFilter:
    filter_cls = FILTER_CLASSES.get(descriptor.entity_type, EntityFilter)
    return filter_cls(
        descriptor=descriptor,
        page_int=_to_int("page", descriptor.page),
        limit_int=_to_int("limit", descriptor.limit),
    )


def parse_lead_url(raw_url: str) -> FilterDescriptor:
    """Parse leads list URL without integer conversion"""
    return _parse_for_entity(raw_url, "leads")


def as_filter_map(entity_filter: EntityFilter) -> Dict[str, str]:
    return entity_filter.get_sdk_filter_map()
