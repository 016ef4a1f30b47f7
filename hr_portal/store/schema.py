from dataclasses import dataclass, field
from functools import lru_cache

from sqlalchemy.orm import configure_mappers

from hr_portal.db.base import Base


@dataclass(frozen=True)
class RelationSpec:
    name: str
    target: str  # table name
    local_column: str
    remote_column: str
    many: bool


@dataclass(frozen=True)
class TableSpec:
    name: str
    model: type
    primary_key: str
    columns: tuple[str, ...]
    unique_columns: tuple[str, ...] = ()
    relations: dict[str, RelationSpec] = field(default_factory=dict)


def _table_spec(mapper) -> TableSpec:
    model = mapper.class_
    table = mapper.local_table

    # attribute key by column name
    keys = {prop.columns[0].name: prop.key for prop in mapper.column_attrs}

    relations = {}
    for rel in mapper.relationships:
        local, remote = rel.local_remote_pairs[0]
        relations[rel.key] = RelationSpec(
            name=rel.key,
            target=rel.mapper.local_table.name,
            local_column=keys.get(local.name, local.name),
            remote_column=remote.name,
            many=rel.uselist,
        )

    return TableSpec(
        name=table.name,
        model=model,
        primary_key=keys[mapper.primary_key[0].name],
        columns=tuple(prop.key for prop in mapper.column_attrs),
        unique_columns=tuple(keys[c.name] for c in table.columns if c.unique),
        relations=relations,
    )


@lru_cache(maxsize=1)
def table_registry() -> dict[str, TableSpec]:
    """Every mapped table, keyed by table name."""
    configure_mappers()
    return {mapper.local_table.name: _table_spec(mapper) for mapper in Base.registry.mappers}


def get_table(name: str) -> TableSpec:
    try:
        return table_registry()[name]
    except KeyError:
        raise ValueError(f"Unknown table: {name!r}") from None
