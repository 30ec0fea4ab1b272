"""Relationship inference over a sealed schema.

Derives bidirectional relationships from foreign-key and uniqueness metadata:

- A table with exactly two foreign keys and at most one other column is a
  join table. Each referenced table gets a MANY_TO_MANY to the other one,
  and the join table itself is dropped from the output.
- Any other foreign key that is not part of the primary key gives a
  MANY_TO_ONE on the owning table and a ONE_TO_MANY back on the referenced
  table. A unique foreign key turns both sides into ONE_TO_ONE.
"""
from __future__ import annotations

import logging
from dataclasses import replace

from .model import Column, Relationship, RelationshipType, SealedSchema, Table
from .naming import pluralize, singularize, to_field_name

logger = logging.getLogger(__name__)

# Columns a join table may carry besides its two foreign keys
JOIN_TABLE_MAX_EXTRA_COLUMNS = 1


def collection_field_name(table_name: str) -> str:
    """Field holding many rows of table_name: "course" and "courses" both give "courses"."""
    return pluralize(to_field_name(singularize(table_name)))


def single_field_name(table_name: str) -> str:
    """Field holding one row of table_name on an inverse side: "posts" gives "post"."""
    return to_field_name(singularize(table_name))


def is_join_table(table: Table) -> bool:
    """Exactly two foreign keys and at most one additional column."""
    fk_count = len(table.foreign_key_columns)
    return fk_count == 2 and len(table.columns) - fk_count <= JOIN_TABLE_MAX_EXTRA_COLUMNS


def annotate_relationships(schema: SealedSchema) -> list[Table]:
    """Attach relationships to every table and flag join tables.

    Args:
        schema: Sealed schema; its tables are not modified

    Returns:
        New Table values in declaration order, join tables included with
        join_table=True
    """
    found: dict[str, list[Relationship]] = {t.name: [] for t in schema}
    join_tables: set[str] = set()

    for table in schema:
        if is_join_table(table):
            join_tables.add(table.name)
            _link_many_to_many(table, schema, found)
            continue

        for col in table.foreign_key_columns:
            # Identifying relationships are left to the primary key mapping
            if col.primary_key:
                continue
            _link_foreign_key(table, col, schema, found)

    return [
        replace(t, relationships=tuple(found[t.name]), join_table=t.name in join_tables)
        for t in schema
    ]


def infer_relationships(schema: SealedSchema) -> list[Table]:
    """Attach relationships to every table and drop join tables.

    Returns:
        New Table values in declaration order, join tables excluded
    """
    tables = annotate_relationships(schema)
    removed = [t.name for t in tables if t.join_table]
    if removed:
        logger.debug(f"Removing join tables: {removed}")
    return [t for t in tables if not t.join_table]


def _link_many_to_many(
    join: Table,
    schema: SealedSchema,
    found: dict[str, list[Relationship]]
) -> None:
    fk1, fk2 = join.foreign_key_columns
    table1 = schema.get(fk1.referenced_table)
    table2 = schema.get(fk2.referenced_table)

    if table1 is None or table2 is None:
        logger.debug(f"Join table {join.name} references an unknown table, no MANY_TO_MANY created")
        return

    found[table1.name].append(Relationship(
        type=RelationshipType.MANY_TO_MANY,
        source_table=table1.name,
        target_table=table2.name,
        source_column=fk1.name,
        target_column=fk2.name,
        join_table=join.name,
        field_name=collection_field_name(table2.name),
        target_class_name=table2.class_name,
    ))
    found[table2.name].append(Relationship(
        type=RelationshipType.MANY_TO_MANY,
        source_table=table2.name,
        target_table=table1.name,
        source_column=fk2.name,
        target_column=fk1.name,
        join_table=join.name,
        field_name=collection_field_name(table1.name),
        target_class_name=table1.class_name,
    ))


def _link_foreign_key(
    table: Table,
    col: Column,
    schema: SealedSchema,
    found: dict[str, list[Relationship]]
) -> None:
    referenced = schema.get(col.referenced_table)
    if referenced is None:
        logger.debug(f"{table.name}.{col.name} references unknown table {col.referenced_table}")
        return

    # A unique foreign key means each referenced row has at most one owner
    one_to_one = col.unique
    owning_field = to_field_name(referenced.name)

    found[table.name].append(Relationship(
        type=RelationshipType.ONE_TO_ONE if one_to_one else RelationshipType.MANY_TO_ONE,
        source_table=table.name,
        target_table=referenced.name,
        source_column=col.name,
        target_column=col.referenced_column,
        field_name=owning_field,
        target_class_name=referenced.class_name,
    ))
    found[referenced.name].append(Relationship(
        type=RelationshipType.ONE_TO_ONE if one_to_one else RelationshipType.ONE_TO_MANY,
        source_table=referenced.name,
        target_table=table.name,
        mapped_by=owning_field,
        field_name=single_field_name(table.name) if one_to_one else collection_field_name(table.name),
        target_class_name=table.class_name,
    ))
