"""
Query builder for list and report endpoints.

Translates loosely typed request parameters (strings from a query string)
into a ``QuerySpec``: tagged predicates, a pagination window and a sort
key. Every field that ends up in a ``QuerySpec`` comes from an
``EntityQueryConfig`` allow-list, so request parameters can never inject
arbitrary column names into a storage query.

The builder performs no I/O. The caller passes ``now`` so that all derived
date filters of one request share the same reference instant.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Mapping, Optional

from ..domain.exceptions import InvalidSortFieldException, ValidationException
from .predicates import (
    DateWindow,
    Equals,
    Predicate,
    SubstringAnyOf,
    expired_before,
    expiring_within,
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_WINDOW_DAYS = 30
MAX_WINDOW_DAYS = 3650

# Largest offset a signed 64-bit SQL integer can bind
MAX_OFFSET = 2**63 - 1

TRUE_VALUES = {"true", "1"}
FALSE_VALUES = {"false", "0"}


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class PageWindow:
    """Normalized pagination window."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class SortSpec:
    """Sort key (entity attribute name) and direction."""

    field: str
    direction: SortDirection = SortDirection.DESC


@dataclass(frozen=True)
class FieldFilter:
    """
    Exact-match filter declared for one request parameter.

    Attributes:
        field: Entity attribute the parameter filters on
        enum: Enum the raw value must belong to, if any
        flag: Parse the raw value as a boolean
    """

    field: str
    enum: Optional[type[Enum]] = None
    flag: bool = False

    def parse(self, param: str, raw: str) -> Equals:
        value = raw.strip()
        if self.flag:
            lowered = value.lower()
            if lowered in TRUE_VALUES:
                return Equals(self.field, True)
            if lowered in FALSE_VALUES:
                return Equals(self.field, False)
            raise ValidationException(param, raw, "expected 'true' or 'false'")
        if self.enum is not None:
            try:
                return Equals(self.field, self.enum(value))
            except ValueError:
                allowed = ", ".join(member.value for member in self.enum)
                raise ValidationException(param, raw, f"expected one of: {allowed}")
        if not value:
            raise ValidationException(param, raw, "value cannot be empty")
        return Equals(self.field, value)


@dataclass(frozen=True)
class EntityQueryConfig:
    """
    Allow-list of filterable, searchable and sortable fields for an entity.

    Attributes:
        entity: Entity name used in error messages and logs
        sortable: Request sort names mapped to entity attribute names
        filters: Request parameter names mapped to exact-match filters
        search_fields: Attributes searched by the ``search`` parameter
        date_field: Attribute restricted by ``dateFrom``/``dateTo``
        expiry_field: Attribute restricted by ``expiring``/``expired``
        default_sort: Request sort name used when ``sortBy`` is absent
    """

    entity: str
    sortable: Mapping[str, str]
    filters: Mapping[str, FieldFilter] = field(default_factory=dict)
    search_fields: tuple[str, ...] = ()
    date_field: Optional[str] = None
    expiry_field: Optional[str] = None
    default_sort: str = "createdAt"
    default_direction: SortDirection = SortDirection.DESC


@dataclass(frozen=True)
class QuerySpec:
    """Structured query description consumed by the storage layer."""

    entity: str
    predicates: tuple[Predicate, ...]
    window: PageWindow
    sort: SortSpec


def _parse_positive_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value > 0 else None


def get_pagination_params(
    params: Mapping[str, str],
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> PageWindow:
    """
    Normalize ``page`` and ``limit``.

    Missing or invalid values fall back to defaults; an oversized limit is
    clamped to ``max_limit``. A page whose offset cannot be bound by the
    database counts as invalid.
    """
    limit = min(_parse_positive_int(params.get("limit")) or default_limit, max_limit)
    page = _parse_positive_int(params.get("page")) or DEFAULT_PAGE
    if (page - 1) * limit > MAX_OFFSET:
        page = DEFAULT_PAGE
    return PageWindow(page=page, limit=limit)


def get_sort_spec(params: Mapping[str, str], config: EntityQueryConfig) -> SortSpec:
    """
    Resolve ``sortBy`` and ``sortOrder`` against the entity allow-list.

    Raises:
        InvalidSortFieldException: If ``sortBy`` is not a known sortable field
    """
    sort_by = (params.get("sortBy") or "").strip() or config.default_sort
    if sort_by not in config.sortable:
        raise InvalidSortFieldException(config.entity, sort_by, config.sortable.keys())

    raw_order = (params.get("sortOrder") or "").strip().lower()
    try:
        direction = SortDirection(raw_order)
    except ValueError:
        direction = config.default_direction

    return SortSpec(field=config.sortable[sort_by], direction=direction)


def utcnow() -> datetime:
    """Current time as naive UTC, the representation used for storage."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(param: str, raw: str) -> datetime:
    """
    Parse an ISO-8601 date or timestamp into naive UTC.

    Raises:
        ValidationException: If the value is not a valid ISO-8601 date
    """
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ValidationException(param, raw, "expected an ISO-8601 date or timestamp")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date_window(params: Mapping[str, str]) -> DateWindow:
    """
    Read the optional inclusive ``dateFrom``/``dateTo`` window.

    Raises:
        ValidationException: On malformed dates or ``dateFrom`` after ``dateTo``
    """
    raw_from = params.get("dateFrom")
    raw_to = params.get("dateTo")
    date_from = parse_datetime("dateFrom", raw_from) if raw_from else None
    date_to = parse_datetime("dateTo", raw_to) if raw_to else None

    if date_from and date_to and date_from > date_to:
        raise ValidationException(
            "dateFrom", raw_from, "dateFrom must not be later than dateTo"
        )
    return DateWindow(date_from=date_from, date_to=date_to)


def parse_days(
    raw: Optional[str],
    default: int = DEFAULT_WINDOW_DAYS,
    maximum: int = MAX_WINDOW_DAYS,
) -> int:
    """
    Positive day count, or ``default`` when missing or invalid.

    Counts above ``maximum`` are clamped to it.
    """
    return min(_parse_positive_int(raw) or default, maximum)


def _is_truthy(raw: Optional[str]) -> bool:
    return raw is not None and raw.strip().lower() in TRUE_VALUES


class QueryBuilder:
    """Builds ``QuerySpec`` objects for one entity."""

    def __init__(
        self,
        config: EntityQueryConfig,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
        default_window_days: int = DEFAULT_WINDOW_DAYS,
        max_window_days: int = MAX_WINDOW_DAYS,
    ):
        """
        Initialize builder.

        Args:
            config: Entity allow-list
            default_limit: Page size used when ``limit`` is missing or invalid
            max_limit: Upper bound for ``limit``
            default_window_days: Window used by ``expiring`` when not a positive number
            max_window_days: Upper bound for ``expiring``
        """
        self.config = config
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.default_window_days = default_window_days
        self.max_window_days = max_window_days

    def build(self, params: Mapping[str, str], now: datetime) -> QuerySpec:
        """
        Build the query description for a list request.

        Args:
            params: Raw request parameters
            now: Reference instant for derived date filters

        Returns:
            Validated query description

        Raises:
            ValidationException: On invalid filter values or unknown sort fields
        """
        window = get_pagination_params(params, self.default_limit, self.max_limit)
        sort = get_sort_spec(params, self.config)
        predicates = self.build_predicates(params, now)
        return QuerySpec(
            entity=self.config.entity,
            predicates=predicates,
            window=window,
            sort=sort,
        )

    def build_predicates(
        self, params: Mapping[str, str], now: datetime
    ) -> tuple[Predicate, ...]:
        """Build the predicate set only (used by reports that do not paginate)."""
        predicates: list[Predicate] = []

        for param, field_filter in self.config.filters.items():
            raw = params.get(param)
            if raw is None or raw == "":
                continue
            predicates.append(field_filter.parse(param, raw))

        search = (params.get("search") or "").strip()
        if search and self.config.search_fields:
            predicates.append(SubstringAnyOf(fields=self.config.search_fields, term=search))

        if self.config.date_field:
            date_range = parse_date_window(params).to_range(self.config.date_field)
            if date_range is not None:
                predicates.append(date_range)

        if self.config.expiry_field:
            expiry_range = self._expiry_predicate(params, now)
            if expiry_range is not None:
                predicates.append(expiry_range)

        return tuple(predicates)

    def _expiry_predicate(self, params: Mapping[str, str], now: datetime):
        expiring = params.get("expiring")
        expired = _is_truthy(params.get("expired"))
        if expiring and expired:
            raise ValidationException(
                "expired", params.get("expired"), "cannot be combined with expiring"
            )
        if expired:
            return expired_before(self.config.expiry_field, now)
        if expiring:
            days = parse_days(expiring, self.default_window_days, self.max_window_days)
            return expiring_within(self.config.expiry_field, now, days)
        return None
