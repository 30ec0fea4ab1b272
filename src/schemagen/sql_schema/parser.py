"""Schema text to relationship-annotated table model.

Entry point for the parsing engine. Runs comment stripping, optional dialect
normalization with sqlglot, both statement passes and relationship
inference, and returns the tables a code generator should emit.
"""
from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import sqlglot
from sqlglot.errors import SqlglotError

from .model import Table
from .processor import build_schema_draft
from .relationships import infer_relationships
from .scanner import split_outside_parens, strip_comments

if TYPE_CHECKING:
    from schemagen.config import SchemagenConfig

logger = logging.getLogger(__name__)

# Our dialect names -> sqlglot dialect names
SQLGLOT_DIALECTS = {
    "mysql": "mysql",
    "postgres": "postgres",
    "sqlserver": "tsql",
    "oracle": "oracle",
}

_SCHEMA_STATEMENT_RE = re.compile(r'^\s*(?:CREATE\s+(?:TEMPORARY\s+)?TABLE|ALTER\s+TABLE)\b', re.IGNORECASE)
# SQL Server batch separator on its own line
_GO_BATCH_RE = re.compile(r'^\s*GO\s*$', re.IGNORECASE | re.MULTILINE)
# Postgres serial pseudo-types in column position; MySQL keeps them verbatim
_SERIAL_COLUMN_RE = re.compile(
    r'((?:^|[(,]|\bADD\s+(?:COLUMN\s+)?)\s*[`"]?\w+[`"]?\s+)(SMALL|BIG)?SERIAL\b',
    re.IGNORECASE
)


def detect_sql_dialect(content: str) -> str:
    """Auto-detect SQL dialect from content.

    Looks for dialect-specific patterns to determine the source database.

    Args:
        content: SQL schema text

    Returns:
        Detected dialect: "mysql", "postgres", "sqlserver", "oracle", or "mysql" (default)
    """
    postgres_patterns = [
        r'\bSERIAL\b',
        r'\bBIGSERIAL\b',
        r'\bTIMESTAMPTZ\b',
        r'\bJSONB\b',
        r'\bBYTEA\b',
        r'::\w+',
        r'\bGENERATED\s+(?:ALWAYS|BY\s+DEFAULT)\s+AS\s+IDENTITY\b',
    ]
    postgres_score = sum(1 for p in postgres_patterns if re.search(p, content, re.IGNORECASE))

    sqlserver_patterns = [
        r'\bIDENTITY\s*\(',
        r'^\s*GO\s*$',
        r'\[\w+\]',
        r'\bNVARCHAR\b',
        r'\bDATETIME2\b',
        r'\bUNIQUEIDENTIFIER\b',
    ]
    sqlserver_score = sum(1 for p in sqlserver_patterns if re.search(p, content, re.IGNORECASE | re.MULTILINE))

    oracle_patterns = [
        r'\bVARCHAR2\b',
        r'\bNUMBER\s*\(',
        r'\bCLOB\b',
        r'\bSYSDATE\b',
        r'^\s*/\s*$',
    ]
    oracle_score = sum(1 for p in oracle_patterns if re.search(p, content, re.IGNORECASE | re.MULTILINE))

    mysql_patterns = [
        r'\bAUTO_INCREMENT\b',
        r'`\w+`',
        r'\bENGINE\s*=',
        r'\bTINYINT\b',
        r'\bMEDIUMINT\b',
    ]
    mysql_score = sum(1 for p in mysql_patterns if re.search(p, content, re.IGNORECASE))

    # Determine winner; mysql first so it wins ties
    scores = {
        'mysql': mysql_score,
        'postgres': postgres_score,
        'sqlserver': sqlserver_score,
        'oracle': oracle_score,
    }

    max_score = max(scores.values())
    if max_score >= 2:  # Need at least 2 patterns to be confident
        for dialect, score in scores.items():
            if score == max_score:
                return dialect

    return "mysql"


def normalize_dialect(sql: str, dialect: str) -> str:
    """Transpile CREATE/ALTER TABLE statements to MySQL syntax.

    Other statements are dropped. A statement sqlglot cannot handle is kept
    as written. SERIAL / BIGSERIAL columns become INT / BIGINT AUTO_INCREMENT.

    Args:
        sql: Schema text without comments
        dialect: Source dialect ("postgres", "sqlserver", "oracle")

    Returns:
        Semicolon-terminated MySQL statements
    """
    read = SQLGLOT_DIALECTS.get(dialect, dialect)
    statements = []

    for stmt in _split_statements(sql, dialect):
        if not _SCHEMA_STATEMENT_RE.match(stmt):
            continue
        try:
            statements.extend(sqlglot.transpile(stmt, read=read, write="mysql"))
        except SqlglotError as e:
            logger.debug(f"sqlglot could not transpile statement from {dialect}, keeping it as is: {e}")
            statements.append(stmt.strip())

    return "".join(f"{_expand_serial(s)};\n" for s in statements)


def _split_statements(sql: str, dialect: str) -> list[str]:
    """Split on semicolons, and on GO batch lines for SQL Server."""
    batches = _GO_BATCH_RE.split(sql) if dialect == "sqlserver" else [sql]
    return [stmt for batch in batches for stmt in split_outside_parens(batch, ';')]


def _expand_serial(stmt: str) -> str:
    return _SERIAL_COLUMN_RE.sub(
        lambda m: f"{m.group(1)}{(m.group(2) or '').upper()}INT AUTO_INCREMENT",
        stmt
    )


def parse_schema(
    sql: str,
    config: SchemagenConfig | None = None,
    dialect: str | None = None
) -> list[Table]:
    """Parse schema text into tables with inferred relationships.

    Args:
        sql: Text containing CREATE TABLE / ALTER TABLE statements; anything
             else is ignored
        config: Parser configuration (defaults if None)
        dialect: Overrides config.dialect; "auto" detects from content

    Returns:
        Tables in declaration order with columns and relationships populated,
        join tables excluded. Empty if nothing was recognized.
    """
    if config is None:
        from schemagen.config import SchemagenConfig
        config = SchemagenConfig()

    if not sql or not sql.strip():
        return []

    text = strip_comments(sql) if config.strip_comments else sql

    dialect = (dialect or config.dialect).lower()
    if dialect == "auto":
        dialect = detect_sql_dialect(text)
        logger.debug(f"Detected SQL dialect: {dialect}")
    elif dialect not in SQLGLOT_DIALECTS:
        logger.warning(f"Unknown SQL dialect {dialect!r}, reading input as mysql")
        dialect = "mysql"

    if dialect != "mysql":
        text = normalize_dialect(text, dialect)

    draft = build_schema_draft(text, map_type=config.type_mapping.mapper())
    tables = infer_relationships(draft.seal())

    logger.debug(f"Parsed {len(draft)} tables, {len(tables)} after removing join tables")
    return tables
