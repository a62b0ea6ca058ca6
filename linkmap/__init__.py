"""Parse ld64 link maps into object files, sections and symbols."""
from .demangle import demangle
from .model import LinkMap, ObjectFile, Section, Symbol
from .parser import ParsingPhase, parse_linkmap, parse_lines

__version__ = "0.1.0"

__all__ = [
    "LinkMap",
    "ObjectFile",
    "ParsingPhase",
    "Section",
    "Symbol",
    "demangle",
    "parse_linkmap",
    "parse_lines",
]
