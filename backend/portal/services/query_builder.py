"""Translate UI filter/sort inputs into Airtable query parameters.

Builds ``filterByFormula`` expressions and ``sort[i][...]`` descriptors.
Every input branch degrades to "no constraint": empty or missing values never
produce a clause, so the emitted formula is always well formed.

Formula composition:
- zero clauses -> no formula (``None``)
- one clause -> the bare clause
- two or more -> ``AND(c1,c2,...)``
"""

from collections.abc import Mapping
from typing import Any

from portal.airtable_schema import FORM_PROGRAM_SLUG_FIELD_NAME, MEMBER_EMAIL_FIELD_NAME
from portal.schemas.airtable import SortSpec
from portal.schemas.resources import SortKey

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100

# Logical sort key -> Airtable field name on the resources table
SORT_FIELDS: dict[str, str] = {
    SortKey.NAME.value: "DisplayName",
    SortKey.LAST_UPDATED.value: "LastUpdatedISO",
    SortKey.DOWNLOAD_COUNT.value: "DownloadCount",
    SortKey.CATEGORY.value: "Category",
}
DEFAULT_SORT_FIELD = SORT_FIELDS[SortKey.NAME.value]

# Haystacks searched by the free-text clause
_SEARCH_HAYSTACKS = (
    "{DisplayName}&' '&ARRAYJOIN({Tags})&' '&{Category}",
    "{Name}&' '&{Title}",
)


def escape_formula_string(value: str) -> str:
    """Escape a value for use inside a single-quoted formula string literal.

    Backslashes are escaped first so an input ending in ``\\`` cannot swallow
    the closing quote.
    """
    return value.replace("\\", "\\\\").replace("'", "\\'")


def unescape_formula_string(value: str) -> str:
    """Inverse of escape_formula_string."""
    out: list[str] = []
    chars = iter(value)
    for ch in chars:
        if ch == "\\":
            out.append(next(chars, ""))
        else:
            out.append(ch)
    return "".join(out)


def quote(value: str) -> str:
    return f"'{escape_formula_string(value)}'"


def combine_clauses(clauses: list[str]) -> str | None:
    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return f"AND({','.join(clauses)})"


def _param(params: Mapping[str, Any], key: str) -> str | None:
    value = params.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def search_clause(term: str) -> str:
    """Case-insensitive substring test across the searchable fields."""
    needle = quote(term)
    predicates = [f"FIND(LOWER({needle}), LOWER({haystack}))>0" for haystack in _SEARCH_HAYSTACKS]
    return f"OR({','.join(predicates)})"


def build_resource_filter_formula(params: Mapping[str, Any]) -> str | None:
    """Build ``filterByFormula`` for the resources table.

    Args:
        params: Query parameters; recognises ``program``, ``type``,
            ``bookmarked`` and ``search``. Anything else is ignored.

    Returns:
        Formula string, or None when no filter is active.
    """
    clauses: list[str] = []

    program = _param(params, "program")
    if program:
        clauses.append(f"{{Program}} = {quote(program)}")

    resource_type = _param(params, "type")
    if resource_type:
        clauses.append(f"{{ResourceType}} = {quote(resource_type)}")

    bookmarked = _param(params, "bookmarked")
    if bookmarked is not None and bookmarked.lower() == "true":
        clauses.append("{IsBookmarked} = TRUE()")

    search = _param(params, "search")
    if search:
        clauses.append(search_clause(search))

    return combine_clauses(clauses)


def build_resource_sort(params: Mapping[str, Any]) -> list[SortSpec]:
    """Map ``sortBy``/``sortOrder`` onto a single sort descriptor.

    Unknown or missing keys sort by name; any order other than ``desc`` is
    ascending.
    """
    sort_by = _param(params, "sortBy") or SortKey.NAME.value
    sort_order = (_param(params, "sortOrder") or "asc").lower()
    field = SORT_FIELDS.get(sort_by, DEFAULT_SORT_FIELD)
    return [SortSpec(field=field, direction="desc" if sort_order == "desc" else "asc")]


def encode_sort_params(sort: list[SortSpec]) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for i, spec in enumerate(sort):
        params.append((f"sort[{i}][field]", spec.field))
        params.append((f"sort[{i}][direction]", spec.direction))
    return params


def clamp_page_size(limit: Any) -> int:
    """Clamp a requested page size into [1, MAX_PAGE_SIZE]; default 50."""
    if limit is None or limit == "":
        return DEFAULT_PAGE_SIZE
    try:
        value = int(float(limit))
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_PAGE_SIZE
    return min(max(value, 1), MAX_PAGE_SIZE)


def member_email_formula(email: str) -> str:
    """Case-insensitive member lookup by email address."""
    normalized = email.strip().lower()
    return f"LOWER({{{MEMBER_EMAIL_FIELD_NAME}}})={quote(normalized)}"


def program_slug_formula(slug: str) -> str:
    return f"{{{FORM_PROGRAM_SLUG_FIELD_NAME}}}={quote(slug)}"
