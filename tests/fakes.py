"""
In-memory stand-ins for the two external stores.

Both support latency and failure injection per (table, operation) or per
method so the bootstrap and provisioning paths can be driven without a
database.
"""
import asyncio
import secrets
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

from hr_portal.core.errors import AuthenticationError, StoreRejected, TransientStoreError
from hr_portal.identity.base import AuthEvent, AuthEventType, AuthSession, Identity
from hr_portal.identity.channel import AuthEventChannel
from hr_portal.store.base import Filters, Row, expand_tree, split_filter_key, split_order_key
from hr_portal.store.schema import TableSpec, get_table, table_registry


def _matches(row: Row, filters: Filters | None) -> bool:
    for key, value in (filters or {}).items():
        column, op = split_filter_key(key)
        actual = row.get(column)
        if op == "eq" and actual != value:
            return False
        if op == "ne" and actual == value:
            return False
        if op in ("gt", "gte", "lt", "lte") and actual is None:
            return False
        if op == "gt" and not actual > value:
            return False
        if op == "gte" and not actual >= value:
            return False
        if op == "lt" and not actual < value:
            return False
        if op == "lte" and not actual <= value:
            return False
        if op == "in" and actual not in list(value):
            return False
        if op == "isnull" and (actual is None) != bool(value):
            return False
        if op == "icontains" and (actual is None or str(value).lower() not in str(actual).lower()):
            return False
    return True


def _matches_any(row: Row, any_of: Filters | None) -> bool:
    if not any_of:
        return True
    return any(_matches(row, {key: value}) for key, value in any_of.items())


def _column_defaults(spec: TableSpec) -> Row:
    defaults: Row = {}
    for column in spec.model.__table__.columns:
        key = column.key
        if column.default is not None and column.default.is_scalar:
            defaults[key] = column.default.arg
        elif column.server_default is not None:
            defaults[key] = datetime.now(timezone.utc)
        else:
            defaults[key] = None
    return defaults


class InMemoryRecordStore:
    def __init__(self):
        self.tables: dict[str, list[Row]] = defaultdict(list)
        self.calls: list[tuple[str, str]] = []
        self._delays: dict[tuple[str, str], float] = {}
        self._failures: dict[tuple[str, str], Exception] = {}

    # injection

    def delay(self, table: str, operation: str, seconds: float) -> None:
        self._delays[(table, operation)] = seconds

    def fail(self, table: str, operation: str, exc: Exception | None = None) -> None:
        self._failures[(table, operation)] = exc or TransientStoreError(table, operation, "connection reset")

    def heal(self) -> None:
        self._delays.clear()
        self._failures.clear()

    def seed(self, table: str, **values) -> Row:
        spec = get_table(table)
        row = {**_column_defaults(spec), **values}
        if row.get(spec.primary_key) is None:
            row[spec.primary_key] = uuid.uuid4()
        self.tables[table].append(row)
        return dict(row)

    def count_calls(self, table: str, operation: str) -> int:
        return self.calls.count((table, operation))

    async def _enter(self, table: str, operation: str) -> TableSpec:
        spec = get_table(table)
        self.calls.append((table, operation))
        seconds = self._delays.get((table, operation))
        if seconds:
            await asyncio.sleep(seconds)
        exc = self._failures.get((table, operation))
        if exc is not None:
            raise exc
        return spec

    # expansion

    def _expand(self, row: Row, spec: TableSpec, tree: dict[str, dict]) -> Row:
        out = dict(row)
        registry = table_registry()
        for name, subtree in tree.items():
            relation = spec.relations[name]
            target = registry[relation.target]
            related = [
                r for r in self.tables[relation.target]
                if row.get(relation.local_column) is not None and r.get(relation.remote_column) == row.get(relation.local_column)
            ]
            if relation.many:
                out[name] = [self._expand(r, target, subtree) for r in related]
            else:
                out[name] = self._expand(related[0], target, subtree) if related else None
        return out

    # RecordStore

    async def find_one(self, table: str, filters: Filters, expand: Sequence[str] = ()) -> Row | None:
        spec = await self._enter(table, "find_one")
        tree = expand_tree(expand)
        for row in self.tables[table]:
            if _matches(row, filters):
                return self._expand(row, spec, tree)
        return None

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
        spec = await self._enter(table, "find_many")
        tree = expand_tree(expand)
        rows = [row for row in self.tables[table] if _matches(row, filters) and _matches_any(row, any_of)]
        if isinstance(order_by, str):
            order_by = [order_by]
        for key in reversed(list(order_by or ())):
            column, descending = split_order_key(key)
            rows.sort(key=lambda r: (r.get(column) is None, r.get(column) if r.get(column) is not None else 0), reverse=descending)
        rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]
        return [self._expand(row, spec, tree) for row in rows]

    async def count(self, table: str, filters: Filters | None = None, any_of: Filters | None = None) -> int:
        await self._enter(table, "count")
        return sum(1 for row in self.tables[table] if _matches(row, filters) and _matches_any(row, any_of))

    async def insert(self, table: str, row: Row) -> Row:
        spec = await self._enter(table, "insert")
        new = {**_column_defaults(spec), **row}
        if new.get(spec.primary_key) is None:
            new[spec.primary_key] = uuid.uuid4()
        for column in (spec.primary_key, *spec.unique_columns):
            value = new.get(column)
            if value is not None and any(existing.get(column) == value for existing in self.tables[table]):
                raise StoreRejected(table, "insert", f"duplicate key value violates unique constraint on {column}")
        self.tables[table].append(new)
        return dict(new)

    async def update(self, table: str, filters: Filters, patch: Row) -> list[Row]:
        await self._enter(table, "update")
        updated = []
        for row in self.tables[table]:
            if _matches(row, filters):
                row.update(patch)
                updated.append(dict(row))
        return updated


class FakeSessionStore:
    """
    Scriptable SessionStore. Tests can pre-seed a session (as if restored from
    a previous visit), slow down or break individual calls, and publish
    arbitrary events.
    """

    def __init__(self):
        self.accounts: dict[str, tuple[str, Identity]] = {}
        self.session: AuthSession | None = None
        self.sign_out_calls = 0
        self.identity_calls = 0
        # identity lookups return None (token revoked server-side)
        self.identity_revoked = False

        self.get_session_delay = 0.0
        self.get_session_error: Exception | None = None
        self.identity_delay = 0.0
        self._channels: set[AuthEventChannel] = set()

    def add_account(self, email: str, password: str = "secret123", **metadata: Any) -> Identity:
        identity = Identity(subject_id=uuid.uuid4(), email=email, metadata=dict(metadata))
        self.accounts[email] = (password, identity)
        return identity

    def issue(self, identity: Identity) -> AuthSession:
        return AuthSession(
            access_token=secrets.token_hex(8),
            refresh_token=secrets.token_hex(8),
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
            identity=identity,
        )

    def restore(self, identity: Identity) -> AuthSession:
        """A session left over from a previous visit; no event is published."""
        self.session = self.issue(identity)
        return self.session

    def emit(self, event_type: AuthEventType, session: AuthSession | None = None) -> None:
        for channel in list(self._channels):
            channel.publish(AuthEvent(event_type, session))

    def subscribe(self) -> AuthEventChannel:
        channel = AuthEventChannel(on_close=self._channels.discard)
        self._channels.add(channel)
        return channel

    async def get_session(self) -> AuthSession | None:
        if self.get_session_delay:
            await asyncio.sleep(self.get_session_delay)
        if self.get_session_error is not None:
            raise self.get_session_error
        return self.session

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        await asyncio.sleep(0)
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            raise AuthenticationError("Invalid credentials")
        self.session = self.issue(account[1])
        self.emit(AuthEventType.SIGNED_IN, self.session)
        return self.session

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any] | None = None) -> Identity:
        if email in self.accounts:
            raise AuthenticationError("Email already registered")
        return self.add_account(email, password, **(metadata or {}))

    async def sign_out(self) -> None:
        self.sign_out_calls += 1
        self.session = None
        self.emit(AuthEventType.SIGNED_OUT)

    async def get_current_identity(self) -> Identity | None:
        self.identity_calls += 1
        if self.identity_delay:
            await asyncio.sleep(self.identity_delay)
        if self.session is None or self.identity_revoked:
            return None
        return self.session.identity

    async def refresh_session(self) -> AuthSession:
        if self.session is None:
            raise AuthenticationError("No session to refresh")
        self.session = self.issue(self.session.identity)
        self.emit(AuthEventType.TOKEN_REFRESHED, self.session)
        return self.session
