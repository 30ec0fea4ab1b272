"""Apply scanned CREATE TABLE / ALTER TABLE statements to a schema draft.

Pass 1 builds tables and columns from CREATE TABLE blocks, pass 2 mutates
them with ALTER TABLE clauses. Fragments that match no known shape and
references to unknown tables or columns are skipped; a single bad line never
aborts the rest of the schema.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from .model import Column, DraftTable, SchemaDraft
from .naming import map_sql_type, to_class_name, to_field_name
from .scanner import (
    AlterAddFk,
    AlterAddPk,
    AlterAddUnique,
    AlterDropColumn,
    AlterModifyAutoIncrement,
    AlterTable,
    ColumnDecl,
    CreateTable,
    SkippedDirective,
    TableForeignKey,
    TablePrimaryKey,
    TableUnique,
    scan_alter_clauses,
    scan_alter_tables,
    scan_create_tables,
    scan_table_element,
    split_outside_parens,
)

logger = logging.getLogger(__name__)

TypeMapper = Callable[[str], str]


def build_schema_draft(sql: str, map_type: TypeMapper = map_sql_type) -> SchemaDraft:
    """Run both statement passes over schema text.

    Args:
        sql: Schema text, comments already removed
        map_type: Maps a SQL type token to a target-language type

    Returns:
        SchemaDraft holding every table in declaration order
    """
    draft = SchemaDraft()

    # First pass: tables and columns
    for stmt in scan_create_tables(sql):
        draft.add(build_table(stmt, map_type))

    # Second pass: ALTER TABLE
    for stmt in scan_alter_tables(sql):
        apply_alter_table(draft, stmt)

    return draft


def build_table(stmt: CreateTable, map_type: TypeMapper = map_sql_type) -> DraftTable:
    """Build a draft table from one CREATE TABLE block."""
    table = DraftTable(name=stmt.name, class_name=to_class_name(stmt.name))

    for fragment in split_outside_parens(stmt.body, ','):
        element = scan_table_element(fragment)

        if element is None:
            if fragment.strip():
                logger.debug(f"Skipping unrecognized fragment in {stmt.name} (line {stmt.line}): {fragment.strip()!r}")

        elif isinstance(element, ColumnDecl):
            table.columns.append(column_from_decl(element, map_type))

        elif isinstance(element, TableForeignKey):
            table.update(
                element.column,
                lambda col, e=element: col.with_reference(e.ref_table, e.ref_column)
            )

        elif isinstance(element, TablePrimaryKey):
            for name in element.columns:
                table.update(name, Column.as_primary_key)

        elif isinstance(element, TableUnique):
            for name in element.columns:
                table.update(name, lambda col: replace(col, unique=True))

        elif isinstance(element, SkippedDirective):
            logger.debug(f"Skipping directive in {stmt.name}: {element.text!r}")

    logger.debug(f"Parsed table {table.name} with {len(table.columns)} columns")
    return table


def column_from_decl(decl: ColumnDecl, map_type: TypeMapper = map_sql_type) -> Column:
    """Create a column from its declaration, including an inline REFERENCES."""
    primary_key = decl.primary_key
    column = Column(
        name=decl.name,
        type=decl.type,
        field_name=to_field_name(decl.name),
        target_type=map_type(decl.type),
        size=decl.size,
        primary_key=primary_key,
        auto_increment=decl.auto_increment,
        nullable=not (decl.not_null or primary_key),
        unique=decl.unique,
    )

    if decl.inline_fk:
        column = column.with_reference(decl.inline_fk.table, decl.inline_fk.column)

    return column


def apply_alter_table(draft: SchemaDraft, stmt: AlterTable) -> bool:
    """Apply one ALTER TABLE statement to the draft.

    Returns:
        False if the statement targets an unknown table
    """
    table = draft.get(stmt.name)
    if table is None:
        logger.debug(f"ALTER TABLE on unknown table {stmt.name} (line {stmt.line}), skipping")
        return False

    for clause in scan_alter_clauses(stmt.body):
        if isinstance(clause, AlterAddPk):
            for name in clause.columns:
                table.update(name, Column.as_primary_key)

        elif isinstance(clause, AlterAddFk):
            table.update(
                clause.column,
                lambda col, c=clause: col.with_reference(c.ref_table, c.ref_column)
            )

        elif isinstance(clause, AlterModifyAutoIncrement):
            table.update(clause.column, lambda col: replace(col, auto_increment=True))

        elif isinstance(clause, AlterAddUnique):
            for name in clause.columns:
                table.update(name, lambda col: replace(col, unique=True))

        elif isinstance(clause, AlterDropColumn):
            if not table.drop(clause.column):
                logger.debug(f"DROP of unknown column {stmt.name}.{clause.column}, ignoring")

    return True
