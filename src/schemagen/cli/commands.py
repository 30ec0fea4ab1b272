from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from schemagen.sql_schema import Table, detect_sql_dialect, parse_schema


def run(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    # Load environment variables first
    load_dotenv()

    # Import config after load_dotenv so SCHEMAGEN_CONFIG from .env is seen
    from schemagen.config import load_config

    parser = argparse.ArgumentParser(
        prog="schemagen",
        description="schemagen - SQL schema parsing and relationship inference"
    )
    parser.add_argument("--config", default=None,
                        help="Path to configuration YAML file (default: $SCHEMAGEN_CONFIG)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd", required=True)

    # Parse command
    parse = sub.add_parser("parse", help="Parse a schema file into tables and relationships")
    parse.add_argument("file", help="SQL file to parse ('-' for stdin)")
    parse.add_argument("--format", choices=["json", "summary"], default="summary",
                       help="Output format (default: summary)")
    parse.add_argument("--dialect", choices=["mysql", "postgres", "sqlserver", "oracle", "auto"],
                       default=None, help="Input dialect (default: from config)")

    # Dialect command
    dialect = sub.add_parser("dialect", help="Detect the SQL dialect of a schema file")
    dialect.add_argument("file", help="SQL file to inspect ('-' for stdin)")

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else getattr(logging, config.log_level),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr
        )

        if args.cmd == "parse":
            sql = read_input(args.file)
            tables = parse_schema(sql, config=config, dialect=args.dialect)
            if args.format == "json":
                print(json.dumps([t.to_dict() for t in tables], indent=2))
            else:
                print(format_summary(tables))
        elif args.cmd == "dialect":
            print(detect_sql_dialect(read_input(args.file)))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def read_input(path: str) -> str:
    """Read schema text from a file, or stdin for '-'."""
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def format_summary(tables: list[Table]) -> str:
    """Human-readable listing of tables, columns and relationships."""
    if not tables:
        return "No tables found"

    lines = [f"Found {len(tables)} tables", ""]
    for table in tables:
        lines.append(f"{table.name} ({table.class_name})")
        for col in table.columns:
            flags = [
                label for label, on in (
                    ("PK", col.primary_key),
                    ("AI", col.auto_increment),
                    ("UNIQUE", col.unique),
                    ("NULL", col.nullable),
                ) if on
            ]
            if col.foreign_key:
                flags.append(f"FK -> {col.referenced_table}.{col.referenced_column}")
            suffix = f" [{', '.join(flags)}]" if flags else ""
            lines.append(f"  {col.field_name}: {col.target_type}  ({col.name} {col.type}){suffix}")
        for rel in table.relationships:
            detail = f"  {rel.type.value} {rel.field_name}: {rel.target_class_name}"
            if rel.join_table:
                detail += f" via {rel.join_table}"
            if rel.mapped_by:
                detail += f" (mappedBy={rel.mapped_by})"
            lines.append(detail)
        lines.append("")

    return "\n".join(lines).rstrip()


if __name__ == "__main__":
    run()
