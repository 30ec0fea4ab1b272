"""SQL Schema parsing and relationship inference.

Turns CREATE TABLE / ALTER TABLE text into a normalized table model:
- Scan statements and clauses into tagged values
- Apply CREATE and ALTER statements to a draft schema
- Infer ONE_TO_ONE, ONE_TO_MANY, MANY_TO_ONE and MANY_TO_MANY relationships
- Drop pure join tables from the output
"""
from __future__ import annotations

from .model import (
    Column,
    DraftTable,
    Relationship,
    RelationshipType,
    SchemaDraft,
    SealedSchema,
    Table,
)

from .naming import (
    map_sql_type,
    pluralize,
    singularize,
    to_class_name,
    to_field_name,
)

from .parser import (
    detect_sql_dialect,
    normalize_dialect,
    parse_schema,
)

from .processor import build_schema_draft
from .relationships import annotate_relationships, infer_relationships, is_join_table

__all__ = [
    # Model
    "Column",
    "DraftTable",
    "Relationship",
    "RelationshipType",
    "SchemaDraft",
    "SealedSchema",
    "Table",
    # Naming
    "map_sql_type",
    "pluralize",
    "singularize",
    "to_class_name",
    "to_field_name",
    # Parsing
    "build_schema_draft",
    "detect_sql_dialect",
    "normalize_dialect",
    "parse_schema",
    # Inference
    "annotate_relationships",
    "infer_relationships",
    "is_join_table",
]
