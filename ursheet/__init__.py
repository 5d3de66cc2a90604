"""Plain-text spreadsheet: lexing, expression evaluation and table rendering."""

__version__ = "0.1.0"
__all__ = ["__version__"]