"""schemagen - SQL schema parsing and relationship inference for code generation."""

__version__ = "0.1.0"
