"""
Record store contract.

The portal reads and writes tables only through this interface: rows are plain
dicts, filters are `{column: value}` equality or `column__op` lookups, and
relations are expanded by name (dotted for nested, e.g. "employee.department").
`any_of` filters match when at least one of them does; they are combined
with `filters` by AND.
"""
from typing import Any, Iterable, Mapping, Protocol, Sequence

from hr_portal.core.errors import NotFoundError

Row = dict[str, Any]
Filters = Mapping[str, Any]

FILTER_OPERATORS = {"eq", "ne", "gt", "gte", "lt", "lte", "in", "isnull", "icontains"}


def split_filter_key(key: str) -> tuple[str, str]:
    """'date__gte' -> ('date', 'gte'); 'status' -> ('status', 'eq')."""
    column, sep, op = key.partition("__")
    if not sep:
        return key, "eq"
    if op not in FILTER_OPERATORS:
        raise ValueError(f"Unsupported filter operator: {op!r}")
    return column, op


def expand_tree(expand: Iterable[str]) -> dict[str, dict]:
    """
    ("employee", "employee.department") -> {"employee": {"department": {}}}
    """
    tree: dict[str, dict] = {}
    for path in expand:
        node = tree
        for part in path.split("."):
            node = node.setdefault(part, {})
    return tree


def split_order_key(key: str) -> tuple[str, bool]:
    """'-review_date' -> ('review_date', True) meaning descending."""
    if key.startswith("-"):
        return key[1:], True
    return key, False


class RecordStore(Protocol):
    async def find_one(self, table: str, filters: Filters, expand: Sequence[str] = ()) -> Row | None:
        """First matching row or None. Raises TransientStoreError on store failure."""
        ...

    async def find_many(
        self,
        table: str,
        filters: Filters | None = None,
        expand: Sequence[str] = (),
        order_by: str | Sequence[str] | None = None,
        limit: int | None = None,
        offset: int = 0,
        any_of: Filters | None = None,
    ) -> list[Row]:
        ...

    async def count(self, table: str, filters: Filters | None = None, any_of: Filters | None = None) -> int:
        ...

    async def insert(self, table: str, row: Row) -> Row:
        """Inserted row (with generated defaults). Raises StoreRejected on constraint/permission failure."""
        ...

    async def update(self, table: str, filters: Filters, patch: Row) -> list[Row]:
        ...


async def require_one(records: RecordStore, table: str, filters: Filters, entity: str, expand: Sequence[str] = ()) -> Row:
    """find_one, raising NotFoundError when nothing matches."""
    row = await records.find_one(table, filters, expand)
    if row is None:
        key = next(iter(filters.values()), None) if len(filters) == 1 else dict(filters)
        raise NotFoundError(entity, key)
    return row
