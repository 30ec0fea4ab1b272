"""Table, column and relationship model.

Tables are built in two phases. The statement processor mutates a
SchemaDraft; once all statements are applied the draft is sealed into a
SealedSchema of frozen tables, and only that sealed form is handed to
relationship inference.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping

logger = logging.getLogger(__name__)


class RelationshipType(str, Enum):
    """Cardinality of a relationship between two entities."""
    ONE_TO_ONE = "ONE_TO_ONE"
    ONE_TO_MANY = "ONE_TO_MANY"
    MANY_TO_ONE = "MANY_TO_ONE"
    MANY_TO_MANY = "MANY_TO_MANY"


@dataclass(frozen=True)
class Column:
    """Column definition from CREATE TABLE, updated by ALTER TABLE."""
    name: str
    type: str
    field_name: str
    target_type: str
    size: str | None = None  # "50" or "10,2"
    primary_key: bool = False
    auto_increment: bool = False
    nullable: bool = True
    foreign_key: bool = False
    unique: bool = False
    referenced_table: str | None = None
    referenced_column: str | None = None

    def with_reference(self, table: str, column: str) -> Column:
        """Return a copy marked as a foreign key to table(column)."""
        if not table or not column:
            raise ValueError(f"Foreign key on {self.name} needs a table and a column")
        return replace(
            self,
            foreign_key=True,
            referenced_table=table,
            referenced_column=column,
        )

    def as_primary_key(self) -> Column:
        return replace(self, primary_key=True, nullable=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "size": self.size,
            "fieldName": self.field_name,
            "targetType": self.target_type,
            "primaryKey": self.primary_key,
            "autoIncrement": self.auto_increment,
            "nullable": self.nullable,
            "foreignKey": self.foreign_key,
            "unique": self.unique,
            "referencedTable": self.referenced_table,
            "referencedColumn": self.referenced_column,
        }


@dataclass(frozen=True)
class Relationship:
    """One side of a relationship between two tables."""
    type: RelationshipType
    source_table: str
    target_table: str
    field_name: str
    target_class_name: str
    source_column: str | None = None  # None on inverse sides
    target_column: str | None = None
    join_table: str | None = None  # MANY_TO_MANY only
    mapped_by: str | None = None  # non-owning side only

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "sourceTable": self.source_table,
            "targetTable": self.target_table,
            "sourceColumn": self.source_column,
            "targetColumn": self.target_column,
            "joinTable": self.join_table,
            "mappedBy": self.mapped_by,
            "fieldName": self.field_name,
            "targetClassName": self.target_class_name,
        }


@dataclass(frozen=True)
class Table:
    """Normalized table handed to code generation."""
    name: str
    class_name: str
    columns: tuple[Column, ...] = ()
    relationships: tuple[Relationship, ...] = ()
    join_table: bool = False

    def column(self, name: str) -> Column | None:
        return next((c for c in self.columns if c.name == name), None)

    @property
    def primary_key_columns(self) -> tuple[Column, ...]:
        return tuple(c for c in self.columns if c.primary_key)

    @property
    def foreign_key_columns(self) -> tuple[Column, ...]:
        return tuple(c for c in self.columns if c.foreign_key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "className": self.class_name,
            "joinTable": self.join_table,
            "columns": [c.to_dict() for c in self.columns],
            "relationships": [r.to_dict() for r in self.relationships],
        }


@dataclass
class DraftTable:
    """Mutable table used while statements are still being applied."""
    name: str
    class_name: str
    columns: list[Column] = field(default_factory=list)

    def find(self, column_name: str) -> int:
        """Index of the named column, or -1."""
        for i, col in enumerate(self.columns):
            if col.name == column_name:
                return i
        return -1

    def update(self, column_name: str, change) -> bool:
        """Replace the named column with change(column).

        Returns:
            False if the column does not exist
        """
        idx = self.find(column_name)
        if idx == -1:
            logger.debug(f"Column {self.name}.{column_name} not found, ignoring")
            return False
        self.columns[idx] = change(self.columns[idx])
        return True

    def drop(self, column_name: str) -> int:
        """Remove every column with this name; returns how many were removed."""
        before = len(self.columns)
        self.columns = [c for c in self.columns if c.name != column_name]
        return before - len(self.columns)

    def freeze(self) -> Table:
        return Table(name=self.name, class_name=self.class_name, columns=tuple(self.columns))


class SchemaDraft:
    """Insertion-ordered arena of draft tables keyed by name."""

    def __init__(self) -> None:
        self._tables: dict[str, DraftTable] = {}

    def add(self, table: DraftTable) -> None:
        if table.name in self._tables:
            logger.warning(f"Table {table.name} declared more than once, keeping the last definition")
        self._tables[table.name] = table

    def get(self, name: str) -> DraftTable | None:
        return self._tables.get(name)

    def __len__(self) -> int:
        return len(self._tables)

    def __iter__(self) -> Iterator[DraftTable]:
        return iter(self._tables.values())

    def seal(self) -> SealedSchema:
        """Freeze every table; the draft should not be used afterwards."""
        return SealedSchema(tuple(t.freeze() for t in self._tables.values()))


class SealedSchema:
    """Frozen tables plus a read-only name lookup."""

    def __init__(self, tables: tuple[Table, ...]) -> None:
        self.tables = tables
        self.by_name: Mapping[str, Table] = MappingProxyType({t.name: t for t in tables})

    def get(self, name: str | None) -> Table | None:
        if name is None:
            return None
        return self.by_name.get(name)

    def __len__(self) -> int:
        return len(self.tables)

    def __iter__(self) -> Iterator[Table]:
        return iter(self.tables)
