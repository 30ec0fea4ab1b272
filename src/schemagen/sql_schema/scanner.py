"""Structural scanner for CREATE TABLE / ALTER TABLE text.

Recognizes statement and clause shapes with patterns rather than a full
grammar, and emits small tagged values for the statement processor:

- CreateTable / AlterTable for whole statements
- ColumnDecl, TableForeignKey, TablePrimaryKey, TableUnique and
  SkippedDirective for fragments of a CREATE TABLE block
- AlterAddPk, AlterAddFk, AlterModifyAutoIncrement, AlterAddUnique and
  AlterDropColumn for ALTER TABLE bodies

Keywords match case-insensitively. Backtick and double-quote delimiters
around identifiers are stripped.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

# Optional identifier quote
_Q = r'[`"]?'
# Optional "schema." qualifier, not captured
_QUALIFIER = rf'(?:{_Q}\w+{_Q}\.)?'
_CONSTRAINT_NAME = rf'(?:CONSTRAINT\s+(?:{_Q}\w+{_Q}\s+)?)?'

_COMMENT_RE = re.compile(
    r"""('(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|`[^`]*`)"""
    r'|--[^\n]*'
    r'|#[^\n]*'
    r'|/\*(?:[^*]|\*(?!/))*\*/'
)

CREATE_TABLE_HEADER_RE = re.compile(
    rf'\bCREATE\s+(?:TEMPORARY\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?{_QUALIFIER}{_Q}(\w+){_Q}\s*\(',
    re.IGNORECASE
)
# What may follow the closing paren of a CREATE TABLE block
CREATE_TABLE_TAIL_RE = re.compile(
    r'\s*(?:;|ENGINE\b|(?:DEFAULT\s+)?CHARSET\b|(?:DEFAULT\s+)?CHARACTER\s+SET\b|(?:DEFAULT\s+)?COLLATE\b'
    r'|AUTO_INCREMENT\b|COMMENT\b|ROW_FORMAT\b|$)',
    re.IGNORECASE
)
ALTER_TABLE_RE = re.compile(
    rf'\bALTER\s+TABLE\s+(?:ONLY\s+)?(?:IF\s+EXISTS\s+)?{_QUALIFIER}{_Q}(\w+){_Q}\s+([^;]*);',
    re.IGNORECASE
)

COLUMN_RE = re.compile(
    rf'^{_Q}(\w+){_Q}\s+(\w+)(?:\s*\(([^)]*)\))?\s*(.*)$',
    re.DOTALL
)
FK_CONSTRAINT_RE = re.compile(
    rf'FOREIGN\s+KEY\s*(?:{_Q}\w+{_Q}\s*)?\(\s*{_Q}(\w+){_Q}\s*\)\s*'
    rf'REFERENCES\s+{_QUALIFIER}{_Q}(\w+){_Q}\s*\(\s*{_Q}(\w+){_Q}\s*\)',
    re.IGNORECASE
)
INLINE_FK_RE = re.compile(
    rf'REFERENCES\s+{_QUALIFIER}{_Q}(\w+){_Q}\s*\(\s*{_Q}(\w+){_Q}\s*\)',
    re.IGNORECASE
)
TABLE_PK_RE = re.compile(
    rf'^{_CONSTRAINT_NAME}PRIMARY\s+KEY\s*\(([^)]*)\)',
    re.IGNORECASE
)
TABLE_UNIQUE_RE = re.compile(
    rf'^{_CONSTRAINT_NAME}UNIQUE(?:\s+(?:KEY|INDEX))?(?:\s+{_Q}(\w+){_Q})?\s*\(([^)]*)\)',
    re.IGNORECASE
)
DIRECTIVE_RE = re.compile(
    r'^(?:PRIMARY\s+KEY|FOREIGN\s+KEY|CONSTRAINT|UNIQUE|KEY|INDEX|CHECK|FULLTEXT|SPATIAL)\b',
    re.IGNORECASE
)

PRIMARY_KEY_MOD_RE = re.compile(r'\bPRIMARY\s+KEY\b', re.IGNORECASE)
AUTO_INCREMENT_MOD_RE = re.compile(
    r'\b(?:AUTO_?INCREMENT\b|GENERATED\s+(?:ALWAYS|BY\s+DEFAULT)(?:\s+ON\s+NULL)?\s+AS\s+IDENTITY\b|IDENTITY\s*\()',
    re.IGNORECASE
)
UNIQUE_MOD_RE = re.compile(r'\bUNIQUE\b', re.IGNORECASE)
NOT_NULL_MOD_RE = re.compile(r'\bNOT\s+NULL\b', re.IGNORECASE)
# String literals in a column definition (DEFAULT, COMMENT)
_LITERAL_RE = re.compile(r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\"")

ALTER_PK_RE = re.compile(
    rf'\bADD\s+{_CONSTRAINT_NAME}PRIMARY\s+KEY\s*\(([^)]*)\)',
    re.IGNORECASE
)
ALTER_FK_RE = re.compile(
    rf'\bADD\s+(?:CONSTRAINT\s+{_Q}(\w+){_Q}\s+)?FOREIGN\s+KEY\s*(?:{_Q}\w+{_Q}\s*)?\(\s*{_Q}(\w+){_Q}\s*\)\s*'
    rf'REFERENCES\s+{_QUALIFIER}{_Q}(\w+){_Q}\s*\(\s*{_Q}(\w+){_Q}\s*\)',
    re.IGNORECASE
)
ALTER_AUTO_INCREMENT_RE = re.compile(
    rf'\bMODIFY\s+(?:COLUMN\s+)?{_Q}(\w+){_Q}[^,;]*?\bAUTO_?INCREMENT\b',
    re.IGNORECASE
)
ALTER_UNIQUE_RE = re.compile(
    rf'\bADD\s+{_CONSTRAINT_NAME}UNIQUE(?:\s+(?:KEY|INDEX))?(?:\s+{_Q}(\w+){_Q})?\s*\(([^)]*)\)',
    re.IGNORECASE
)
# Key and index drops are not column drops
ALTER_DROP_COLUMN_RE = re.compile(
    rf'\bDROP\s+(?:COLUMN\s+)?(?:IF\s+EXISTS\s+)?{_Q}(?!(?:PRIMARY|FOREIGN|KEY|INDEX|CONSTRAINT)\b)(\w+){_Q}',
    re.IGNORECASE
)

_LIST_ITEM_RE = re.compile(rf'\s*{_Q}(\w+){_Q}')


# ============================================================================
# Tagged values
# ============================================================================

@dataclass(frozen=True)
class CreateTable:
    name: str
    body: str
    line: int = 0


@dataclass(frozen=True)
class AlterTable:
    name: str
    body: str
    line: int = 0


@dataclass(frozen=True)
class InlineFk:
    table: str
    column: str


@dataclass(frozen=True)
class ColumnDecl:
    """Single column declaration inside a CREATE TABLE block."""
    name: str
    type: str
    size: str | None = None
    modifiers: str = ""
    inline_fk: InlineFk | None = None

    @property
    def keywords(self) -> str:
        """Modifiers with string literals blanked, so COMMENT 'unique ...' sets no flag."""
        return _LITERAL_RE.sub("''", self.modifiers)

    @property
    def primary_key(self) -> bool:
        return bool(PRIMARY_KEY_MOD_RE.search(self.keywords))

    @property
    def auto_increment(self) -> bool:
        return bool(AUTO_INCREMENT_MOD_RE.search(self.keywords))

    @property
    def unique(self) -> bool:
        return bool(UNIQUE_MOD_RE.search(self.keywords))

    @property
    def not_null(self) -> bool:
        return bool(NOT_NULL_MOD_RE.search(self.keywords))


@dataclass(frozen=True)
class TableForeignKey:
    column: str
    ref_table: str
    ref_column: str


@dataclass(frozen=True)
class TablePrimaryKey:
    columns: tuple[str, ...]


@dataclass(frozen=True)
class TableUnique:
    columns: tuple[str, ...]
    name: str | None = None


@dataclass(frozen=True)
class SkippedDirective:
    text: str


@dataclass(frozen=True)
class AlterAddPk:
    columns: tuple[str, ...]


@dataclass(frozen=True)
class AlterAddFk:
    column: str
    ref_table: str
    ref_column: str
    constraint_name: str | None = None


@dataclass(frozen=True)
class AlterModifyAutoIncrement:
    column: str


@dataclass(frozen=True)
class AlterAddUnique:
    columns: tuple[str, ...]
    name: str | None = None


@dataclass(frozen=True)
class AlterDropColumn:
    column: str


TableElement = Union[ColumnDecl, TableForeignKey, TablePrimaryKey, TableUnique, SkippedDirective]
AlterClause = Union[AlterAddPk, AlterAddFk, AlterModifyAutoIncrement, AlterAddUnique, AlterDropColumn]


# ============================================================================
# Helper Functions
# ============================================================================

def _blank_comment(match: re.Match) -> str:
    if match.group(1) is not None:
        return match.group(1)
    # Keep line breaks so line numbers stay accurate
    return " " + "\n" * match.group(0).count("\n")


def strip_comments(sql: str) -> str:
    """Remove --, # and /* */ comments, keeping quoted text intact."""
    return _COMMENT_RE.sub(_blank_comment, sql)


def find_balanced_paren(text: str, start: int) -> int:
    """Find the closing parenthesis matching the one at text[start].

    Quoted text (single, double or backtick) is skipped.

    Returns:
        Position of the closing parenthesis, or -1 if not found
    """
    if start >= len(text) or text[start] != '(':
        return -1

    depth = 0
    quote = None

    for i in range(start, len(text)):
        char = text[i]

        if quote:
            # A doubled quote closes and immediately reopens, so toggling works
            if char == quote:
                quote = None
        elif char in ("'", '"', '`'):
            quote = char
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return i

    return -1


def split_outside_parens(text: str, delimiter: str = ',') -> list[str]:
    """Split text on delimiter but not inside parentheses or quotes."""
    parts = []
    current = []
    depth = 0
    quote = None

    for char in text:
        if quote:
            if char == quote:
                quote = None
        elif char in ("'", '"', '`'):
            quote = char
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
        elif char == delimiter and depth == 0:
            parts.append(''.join(current))
            current = []
            continue
        current.append(char)

    if current:
        parts.append(''.join(current))

    return parts


def _column_list(text: str) -> tuple[str, ...]:
    """Names from "a, `b`, c DESC"."""
    names = []
    for part in text.split(','):
        match = _LIST_ITEM_RE.match(part)
        if match:
            names.append(match.group(1))
    return tuple(names)


def _line_of(text: str, pos: int) -> int:
    return text.count('\n', 0, pos) + 1


# ============================================================================
# Scanning
# ============================================================================

def scan_create_tables(sql: str) -> list[CreateTable]:
    """Find every CREATE TABLE block in order of appearance.

    A header whose parenthesized block never closes, or whose block is
    followed by something other than table options, a semicolon or the end of
    input, is skipped.
    """
    tables = []
    pos = 0

    while True:
        header = CREATE_TABLE_HEADER_RE.search(sql, pos)
        if not header:
            break

        open_paren = header.end() - 1
        close_paren = find_balanced_paren(sql, open_paren)
        if close_paren == -1:
            pos = header.end()
            continue

        if not CREATE_TABLE_TAIL_RE.match(sql, close_paren + 1):
            pos = header.end()
            continue

        tables.append(CreateTable(
            name=header.group(1),
            body=sql[open_paren + 1:close_paren],
            line=_line_of(sql, header.start())
        ))
        pos = close_paren + 1

    return tables


def scan_alter_tables(sql: str) -> list[AlterTable]:
    """Find every ALTER TABLE statement (semicolon terminated)."""
    return [
        AlterTable(name=m.group(1), body=m.group(2), line=_line_of(sql, m.start()))
        for m in ALTER_TABLE_RE.finditer(sql)
    ]


def scan_table_element(fragment: str) -> TableElement | None:
    """Classify one comma-separated fragment of a CREATE TABLE block.

    Returns:
        A tagged element, or None if the fragment matches no known shape
    """
    fragment = fragment.strip()
    if not fragment:
        return None

    fk = FK_CONSTRAINT_RE.search(fragment)
    if fk:
        return TableForeignKey(column=fk.group(1), ref_table=fk.group(2), ref_column=fk.group(3))

    pk = TABLE_PK_RE.match(fragment)
    if pk:
        return TablePrimaryKey(columns=_column_list(pk.group(1)))

    unique = TABLE_UNIQUE_RE.match(fragment)
    if unique:
        return TableUnique(columns=_column_list(unique.group(2)), name=unique.group(1))

    if DIRECTIVE_RE.match(fragment):
        return SkippedDirective(text=fragment)

    col = COLUMN_RE.match(fragment)
    if col:
        modifiers = col.group(4).strip()
        inline = INLINE_FK_RE.search(modifiers)
        return ColumnDecl(
            name=col.group(1),
            type=col.group(2),
            size=col.group(3).strip() if col.group(3) is not None else None,
            modifiers=modifiers,
            inline_fk=InlineFk(table=inline.group(1), column=inline.group(2)) if inline else None
        )

    return None


def scan_alter_clauses(body: str) -> list[AlterClause]:
    """Extract every recognized sub-clause of an ALTER TABLE body.

    Clauses are returned in the order they appear in the body.
    """
    found: list[tuple[int, AlterClause]] = []

    for m in ALTER_PK_RE.finditer(body):
        found.append((m.start(), AlterAddPk(columns=_column_list(m.group(1)))))

    for m in ALTER_FK_RE.finditer(body):
        found.append((m.start(), AlterAddFk(
            column=m.group(2),
            ref_table=m.group(3),
            ref_column=m.group(4),
            constraint_name=m.group(1)
        )))

    for m in ALTER_AUTO_INCREMENT_RE.finditer(body):
        found.append((m.start(), AlterModifyAutoIncrement(column=m.group(1))))

    for m in ALTER_UNIQUE_RE.finditer(body):
        found.append((m.start(), AlterAddUnique(columns=_column_list(m.group(2)), name=m.group(1))))

    for m in ALTER_DROP_COLUMN_RE.finditer(body):
        found.append((m.start(), AlterDropColumn(column=m.group(1))))

    found.sort(key=lambda item: item[0])
    return [clause for _, clause in found]
