"""Front end for the Sign expression language: scan -> normalize -> build."""

from .errors import LexError, ParseError, SignSyntaxError, StructureError
from .layout import normalize
from .lexer import scan
from .parser import build, parse_source

__version__ = "0.1.0"

__all__ = [
    "scan",
    "normalize",
    "build",
    "parse_source",
    "SignSyntaxError",
    "LexError",
    "StructureError",
    "ParseError",
]
