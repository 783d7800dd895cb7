"""
Query refinement for listing endpoints.

QueryBuilder turns a flat mapping of query-string parameters into an
immutable QuerySpec. It knows nothing about the ORM; core.storage.apply_spec
translates a QuerySpec into a queryset.

    GET /tours/?duration[gte]=5&difficulty=easy&sort=-ratingsAverage,price
               &fields=name,price&page=2&limit=10

    spec = (
        QueryBuilder(params)
        .filter()
        .sort()
        .limit_fields()
        .paginate()
        .build()
    )

Every step returns the builder, so steps compose in any order. A step that
is never called leaves its part of the spec unset (no constraint).
"""
import re
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Tuple

from .errors import ClientInputError

RESERVED_PARAMS = ("page", "sort", "limit", "fields")
RANGE_OPERATORS = ("gte", "gt", "lte", "lt")

DEFAULT_SORT = "-ratingsAverage"
DEFAULT_EXCLUDED_FIELDS = ("createdAt", "updatedAt")
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 100
# Largest LIMIT/OFFSET a 64-bit database integer holds.
MAX_WINDOW_VALUE = 2 ** 63 - 1

# price[gte] -> ("price", "gte")
_BRACKETED = re.compile(r"^(?P<field>[^\[\]]+)\[(?P<op>[^\[\]]*)\]$")


@dataclass(frozen=True)
class Predicate:
    field: str
    op: str  # "eq" or one of RANGE_OPERATORS
    value: Any


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Projection:
    include: bool
    fields: Tuple[str, ...]


@dataclass(frozen=True)
class Window:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class QuerySpec:
    predicates: Tuple[Predicate, ...] = ()
    ordering: Tuple[SortKey, ...] = ()
    projection: Optional[Projection] = None
    window: Optional[Window] = None


def _split_csv(raw) -> Tuple[str, ...]:
    if not raw:
        return ()
    seen = []
    for part in str(raw).split(","):
        part = part.strip()
        if part and part not in seen:
            seen.append(part)
    return tuple(seen)


def _positive_int(val, default: int) -> int:
    try:
        number = int(str(val).strip())
    except (TypeError, ValueError):
        return default
    return number if 0 < number <= MAX_WINDOW_VALUE else default


class QueryBuilder:
    def __init__(
        self,
        params: Mapping[str, Any],
        default_sort: str = DEFAULT_SORT,
        default_excluded: Tuple[str, ...] = DEFAULT_EXCLUDED_FIELDS,
        max_limit: Optional[int] = None,
    ):
        # copy: the caller's mapping is never modified
        self._params = dict(params)
        self._default_sort = default_sort
        self._default_excluded = tuple(default_excluded)
        self._max_limit = max_limit
        self._spec = QuerySpec()

    # ---------- steps ----------

    def filter(self):
        """
        Every non-reserved key becomes a predicate. `field[op]=v` with op in
        gte/gt/lte/lt is a range predicate; anything else is equality.
        """
        predicates = []
        for key, value in self._params.items():
            if key in RESERVED_PARAMS:
                continue

            if "[" not in key and "]" not in key:
                predicates.append(Predicate(key, "eq", value))
                continue

            match = _BRACKETED.match(key)
            if not match:
                raise ClientInputError(f"Malformed filter parameter '{key}'")
            field, op = match.group("field"), match.group("op")
            if op not in RANGE_OPERATORS:
                raise ClientInputError(
                    f"Unsupported filter operator '{op}' on '{field}'. "
                    f"Use one of: {', '.join(RANGE_OPERATORS)}"
                )
            predicates.append(Predicate(field, op, value))

        self._spec = replace(self._spec, predicates=tuple(predicates))
        return self

    def sort(self):
        """
        `sort=-a,b` -> a descending, ties broken by b ascending.
        """
        keys = []
        for part in _split_csv(self._params.get("sort")) or _split_csv(self._default_sort):
            field = part.lstrip("-")
            if field:
                keys.append(SortKey(field, descending=part.startswith("-")))

        self._spec = replace(self._spec, ordering=tuple(keys))
        return self

    def limit_fields(self):
        """
        `fields=a,b` -> include only a and b. `fields=-a,-b` -> everything
        but a and b. Without `fields`, bookkeeping fields are excluded.
        """
        requested = _split_csv(self._params.get("fields"))
        if not requested:
            projection = Projection(include=False, fields=self._default_excluded)
        else:
            excluded = [f for f in requested if f.startswith("-")]
            if excluded and len(excluded) != len(requested):
                raise ClientInputError("Cannot mix included and excluded fields in 'fields'")
            if excluded:
                fields = tuple(f.lstrip("-") for f in excluded if f.lstrip("-"))
                projection = Projection(include=False, fields=fields)
            else:
                projection = Projection(include=True, fields=requested)

        self._spec = replace(self._spec, projection=projection)
        return self

    def paginate(self):
        """
        Non-numeric, non-positive or out-of-range page/limit fall back to
        1 / 100. A page whose window lies beyond MAX_WINDOW_VALUE is page 1.
        """
        page = _positive_int(self._params.get("page"), DEFAULT_PAGE)
        limit = _positive_int(self._params.get("limit"), DEFAULT_LIMIT)
        if self._max_limit is not None:
            limit = min(limit, self._max_limit)
        if page * limit > MAX_WINDOW_VALUE:
            page = DEFAULT_PAGE

        self._spec = replace(self._spec, window=Window(page=page, limit=limit))
        return self

    # ---------- result ----------

    def build(self) -> QuerySpec:
        return self._spec
