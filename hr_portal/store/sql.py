import asyncio
from typing import Any, Callable, Sequence, TypeVar

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from hr_portal.core.errors import StoreRejected, TransientStoreError
from hr_portal.core.logger import get_logger
from hr_portal.store.base import Filters, Row, expand_tree, split_filter_key, split_order_key
from hr_portal.store.schema import TableSpec, get_table, table_registry

logger = get_logger(__name__)

T = TypeVar("T")

# Postgres "insufficient_privilege"; row-level security rejections surface with this code
_PERMISSION_DENIED = "42501"


def _reason(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    text = str(orig if orig is not None else exc)
    return text.splitlines()[0] if text else exc.__class__.__name__


def _is_rejection(exc: SQLAlchemyError) -> bool:
    if isinstance(exc, IntegrityError):
        return True
    return getattr(getattr(exc, "orig", None), "pgcode", None) == _PERMISSION_DENIED


def _condition(model, key: str, value: Any):
    column, op = split_filter_key(key)
    attr = getattr(model, column)
    if op == "eq":
        return attr.is_(None) if value is None else attr == value
    if op == "ne":
        return attr.is_not(None) if value is None else attr != value
    if op == "gt":
        return attr > value
    if op == "gte":
        return attr >= value
    if op == "lt":
        return attr < value
    if op == "lte":
        return attr <= value
    if op == "in":
        return attr.in_(list(value))
    if op == "icontains":
        return attr.icontains(value, autoescape=True)
    # isnull
    return attr.is_(None) if value else attr.is_not(None)


def _where(stmt, model, filters: Filters | None, any_of: Filters | None):
    for key, value in (filters or {}).items():
        stmt = stmt.where(_condition(model, key, value))
    if any_of:
        stmt = stmt.where(or_(*(_condition(model, key, value) for key, value in any_of.items())))
    return stmt


def _load_options(model, tree: dict[str, dict]) -> list:
    options = []
    for name, subtree in tree.items():
        attr = getattr(model, name)
        option = selectinload(attr)
        children = _load_options(attr.property.mapper.class_, subtree)
        if children:
            option = option.options(*children)
        options.append(option)
    return options


def _to_row(obj, spec: TableSpec, tree: dict[str, dict]) -> Row:
    row = {name: getattr(obj, name) for name in spec.columns}
    registry = table_registry()
    for name, subtree in tree.items():
        relation = spec.relations[name]
        target = registry[relation.target]
        value = getattr(obj, name)
        if relation.many:
            row[name] = [_to_row(item, target, subtree) for item in value]
        else:
            row[name] = _to_row(value, target, subtree) if value is not None else None
    return row


class SqlRecordStore:
    """
    RecordStore over SQLAlchemy ORM models.

    Each call opens its own session and runs in a worker thread. Errors are
    logged here with table/operation context and re-raised as
    TransientStoreError (or StoreRejected for constraint/permission failures).
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    async def _run(self, table: str, operation: str, work: Callable[[Session], T]) -> T:
        return await asyncio.to_thread(self._run_sync, table, operation, work)

    def _run_sync(self, table: str, operation: str, work: Callable[[Session], T]) -> T:
        with self._session_factory() as db:
            try:
                return work(db)
            except SQLAlchemyError as exc:
                db.rollback()
                reason = _reason(exc)
                logger.error(
                    "Record store %s on %s failed",
                    operation,
                    table,
                    extra={"table": table, "operation": operation, "reason": reason},
                )
                if _is_rejection(exc):
                    raise StoreRejected(table, operation, reason) from exc
                raise TransientStoreError(table, operation, reason) from exc

    def _select(self, spec: TableSpec, filters: Filters | None, tree: dict[str, dict], any_of: Filters | None = None):
        stmt = _where(select(spec.model), spec.model, filters, any_of)
        options = _load_options(spec.model, tree)
        if options:
            stmt = stmt.options(*options)
        return stmt

    async def find_one(self, table: str, filters: Filters, expand: Sequence[str] = ()) -> Row | None:
        spec = get_table(table)
        tree = expand_tree(expand)

        def work(db: Session) -> Row | None:
            obj = db.execute(self._select(spec, filters, tree).limit(1)).scalars().first()
            return _to_row(obj, spec, tree) if obj is not None else None

        return await self._run(table, "find_one", work)

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
        spec = get_table(table)
        tree = expand_tree(expand)
        if isinstance(order_by, str):
            order_by = [order_by]

        def work(db: Session) -> list[Row]:
            stmt = self._select(spec, filters, tree, any_of)
            for key in order_by or ():
                column, descending = split_order_key(key)
                attr = getattr(spec.model, column)
                stmt = stmt.order_by(attr.desc() if descending else attr.asc())
            if offset:
                stmt = stmt.offset(offset)
            if limit is not None:
                stmt = stmt.limit(limit)
            return [_to_row(obj, spec, tree) for obj in db.execute(stmt).scalars().all()]

        return await self._run(table, "find_many", work)

    async def count(self, table: str, filters: Filters | None = None, any_of: Filters | None = None) -> int:
        spec = get_table(table)

        def work(db: Session) -> int:
            stmt = _where(select(func.count()).select_from(spec.model), spec.model, filters, any_of)
            return db.execute(stmt).scalar_one()

        return await self._run(table, "count", work)

    async def insert(self, table: str, row: Row) -> Row:
        spec = get_table(table)

        def work(db: Session) -> Row:
            obj = spec.model(**row)
            db.add(obj)
            db.commit()
            db.refresh(obj)
            return _to_row(obj, spec, {})

        return await self._run(table, "insert", work)

    async def update(self, table: str, filters: Filters, patch: Row) -> list[Row]:
        spec = get_table(table)

        def work(db: Session) -> list[Row]:
            objs = db.execute(self._select(spec, filters, {})).scalars().all()
            for obj in objs:
                for key, value in patch.items():
                    setattr(obj, key, value)
            db.commit()
            return [_to_row(obj, spec, {}) for obj in objs]

        return await self._run(table, "update", work)
