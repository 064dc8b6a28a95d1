"""
Parser for property search query strings.

Filter keys follow a closed grammar: ``field`` or ``field[op]`` where ``op`` is one
of gt, gte, lt, lte, in. Keys are matched against a whitelist and values are coerced
to the field's type, producing a list of typed comparisons. Operator words appearing
inside values are never interpreted.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple
import re

from homelyhub.models.property import Amenity, PropertyType
from homelyhub.utils.exceptions import ValidationError
from homelyhub.utils.validators import MAX_INTEGER, ValidationUtils

RESERVED_KEYS = frozenset({"select", "sort", "page", "limit", "search"})

FILTER_KEY_PATTERN = re.compile(r"^(?P<field>[a-z_]+(?:\.[a-z_]+)?)(?:\[(?P<op>[a-z]+)\])?$")

DEFAULT_SORT = "-created_at"


class FilterOperator(str, Enum):
    EQ = "eq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"


RANGE_OPERATORS = frozenset({FilterOperator.GT, FilterOperator.GTE, FilterOperator.LT, FilterOperator.LTE})


@dataclass(frozen=True)
class FilterField:
    """A filterable attribute: how to coerce values and which operators apply."""
    name: str
    coerce: Callable[[str], Any]
    operators: frozenset


@dataclass(frozen=True)
class Comparison:
    """One node of the filter expression: ``field op value``."""
    field: str
    operator: FilterOperator
    value: Any


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


@dataclass
class PropertyQuery:
    """Parsed search request."""
    filters: List[Comparison] = field(default_factory=list)
    search: Optional[str] = None
    sort: List[SortKey] = field(default_factory=list)
    select: Optional[List[str]] = None
    page: int = 1
    limit: int = 12

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def has_filter(self, field_name: str) -> bool:
        return any(c.field == field_name for c in self.filters)


def _to_decimal(raw: str) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, AttributeError):
        raise ValueError(f"'{raw}' is not a number")
    if not value.is_finite():
        raise ValueError(f"'{raw}' is not a number")
    return value


def _to_int(raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"'{raw}' is not an integer")
    if abs(value) > MAX_INTEGER:
        raise ValueError(f"'{raw}' is out of range")
    return value


def _to_float(raw: str) -> float:
    return float(_to_decimal(raw))


def _to_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("true", "1", "yes"):
        return True
    if lowered in ("false", "0", "no"):
        return False
    raise ValueError(f"'{raw}' is not a boolean")


def _to_text(raw: str) -> str:
    return raw.strip()


def _to_object_id(raw: str) -> str:
    return ValidationUtils.validate_object_id(raw.strip(), "host")


def _enum_coercer(enum_cls: type) -> Callable[[str], Any]:
    def coerce(raw: str):
        try:
            return enum_cls(raw.strip())
        except ValueError:
            allowed = ", ".join(member.value for member in enum_cls)
            raise ValueError(f"'{raw}' is not one of: {allowed}")
    return coerce


_NUMERIC_OPS = frozenset(FilterOperator)
_SET_OPS = frozenset({FilterOperator.EQ, FilterOperator.IN})
_EQ_ONLY = frozenset({FilterOperator.EQ})

FILTER_FIELDS: Dict[str, FilterField] = {
    f.name: f for f in (
        FilterField("title", _to_text, _SET_OPS),
        FilterField("type", _enum_coercer(PropertyType), _SET_OPS),
        FilterField("price", _to_decimal, _NUMERIC_OPS),
        FilterField("bedrooms", _to_int, _NUMERIC_OPS),
        FilterField("bathrooms", _to_int, _NUMERIC_OPS),
        FilterField("max_guests", _to_int, _NUMERIC_OPS),
        FilterField("is_active", _to_bool, _EQ_ONLY),
        FilterField("host", _to_object_id, _SET_OPS),
        FilterField("amenities", _enum_coercer(Amenity), _SET_OPS),
        FilterField("location.city", _to_text, _SET_OPS),
        FilterField("location.state", _to_text, _SET_OPS),
        FilterField("location.country", _to_text, _SET_OPS),
        FilterField("location.pincode", _to_text, _SET_OPS),
        FilterField("rating.average", _to_float, _NUMERIC_OPS),
        FilterField("rating.count", _to_int, _NUMERIC_OPS),
    )
}

SORT_FIELDS = frozenset({
    "price", "created_at", "title", "bedrooms", "bathrooms", "max_guests",
    "rating.average", "rating.count",
})

SELECTABLE_FIELDS = frozenset({
    "title", "description", "host", "location", "price", "images", "amenities", "type",
    "bedrooms", "bathrooms", "max_guests", "check_in_time", "check_out_time",
    "house_rules", "availability", "is_active", "rating", "created_at", "updated_at",
})


def parse_filter(key: str, values: List[str]) -> Comparison:
    """
    Parse a single filter parameter.

    Args:
        key: Query-string key such as ``price[gte]``
        values: Every value supplied for the key

    Returns:
        Comparison node

    Raises:
        ValidationError: If the key, operator or value is not recognized
    """
    match = FILTER_KEY_PATTERN.match(key)
    if not match:
        raise ValidationError(f"Invalid filter parameter '{key}'")

    field_name = match.group("field")
    filter_field = FILTER_FIELDS.get(field_name)
    if filter_field is None:
        raise ValidationError(f"Filtering on '{field_name}' is not supported")

    op_token = match.group("op")
    if op_token is None:
        operator = FilterOperator.EQ
    else:
        try:
            operator = FilterOperator(op_token)
        except ValueError:
            operator = None
        if operator is None or operator is FilterOperator.EQ:
            raise ValidationError(f"Unsupported filter operator '{op_token}'")

    if operator not in filter_field.operators:
        raise ValidationError(f"Operator '{operator.value}' cannot be used with '{field_name}'")

    try:
        if operator is FilterOperator.IN:
            raw_items = [item for value in values for item in value.split(",") if item.strip()]
            if not raw_items:
                raise ValueError("at least one value is required")
            value = [filter_field.coerce(item) for item in raw_items]
        else:
            if len(values) != 1:
                raise ValueError("only one value may be given")
            value = filter_field.coerce(values[0])
    except (ValueError, ValidationError) as e:
        detail = e.detail if isinstance(e, ValidationError) else str(e)
        raise ValidationError(f"Invalid value for '{key}': {detail}")

    return Comparison(field=field_name, operator=operator, value=value)


def parse_sort(raw: Optional[str]) -> List[SortKey]:
    """Parse a comma separated sort list; a leading '-' sorts descending."""
    tokens = [token.strip() for token in (raw or DEFAULT_SORT).split(",") if token.strip()]
    if not tokens:
        tokens = [DEFAULT_SORT]

    keys = []
    for token in tokens:
        descending = token.startswith("-")
        name = token[1:] if descending else token
        if name not in SORT_FIELDS:
            raise ValidationError(f"Cannot sort by '{name}'. Allowed fields: {', '.join(sorted(SORT_FIELDS))}")
        keys.append(SortKey(field=name, descending=descending))
    return keys


def parse_select(raw: Optional[str]) -> Optional[List[str]]:
    """Parse a comma separated projection list."""
    if raw is None:
        return None
    fields = [token.strip() for token in raw.split(",") if token.strip()]
    unknown = [name for name in fields if name not in SELECTABLE_FIELDS and name != "id"]
    if unknown:
        raise ValidationError(f"Cannot select unknown fields: {', '.join(unknown)}")
    return [name for name in fields if name != "id"] or None


def _parse_positive_int(raw: Optional[str], name: str, default: int, maximum: Optional[int] = None) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")
    return ValidationUtils.validate_integer(value, name, min_value=1, max_value=maximum)


def parse_property_query(
    params: Iterable[Tuple[str, str]],
    default_limit: int = 12,
    max_limit: int = 100
) -> PropertyQuery:
    """
    Translate raw query parameters into a PropertyQuery.

    Args:
        params: Key/value pairs in request order (repeated keys allowed)
        default_limit: Page size used when ``limit`` is absent
        max_limit: Largest accepted page size

    Returns:
        Parsed query

    Raises:
        ValidationError: If any parameter is malformed
    """
    grouped: Dict[str, List[str]] = {}
    for key, value in params:
        grouped.setdefault(key, []).append(value)

    def single(name: str) -> Optional[str]:
        values = grouped.get(name)
        return values[-1] if values else None

    search = single("search")
    query = PropertyQuery(
        search=search.strip() if search and search.strip() else None,
        sort=parse_sort(single("sort")),
        select=parse_select(single("select")),
        page=_parse_positive_int(single("page"), "page", 1, MAX_INTEGER),
        limit=_parse_positive_int(single("limit"), "limit", default_limit, max_limit),
    )

    for key, values in grouped.items():
        if key in RESERVED_KEYS:
            continue
        query.filters.append(parse_filter(key, values))

    return query


def build_pagination(page: int, limit: int, total: int) -> Dict[str, Dict[str, int]]:
    """
    Navigation descriptors for a page of results.

    ``next`` is present when rows remain after this page, ``prev`` when this is not
    the first page.
    """
    start = (page - 1) * limit
    pagination: Dict[str, Dict[str, int]] = {}
    if start + limit < total:
        pagination["next"] = {"page": page + 1, "limit": limit}
    if start > 0:
        pagination["prev"] = {"page": page - 1, "limit": limit}
    return pagination


def project(document: Dict[str, Any], select: Optional[List[str]]) -> Dict[str, Any]:
    """Restrict a serialized property to the selected attributes (id is always kept)."""
    if not select:
        return document
    projected = {"id": document["id"]}
    for name in select:
        projected[name] = document[name]
    return projected
