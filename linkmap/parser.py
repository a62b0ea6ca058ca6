"""
Parser for ld64 link maps (the file written by `ld -map <file>`).

A link map looks like:

    # Path: /tmp/a.out
    # Arch: arm64
    # Object files:
    [  0] linker synthesized
    [  1] /tmp/main.o
    # Sections:
    # Address	Size    	Segment	Section
    0x100003F80	0x00000020	__TEXT	__text
    # Symbols:
    # Address	Size    	File  Name
    0x100003F80	0x00000020	[  1] _main
    # Dead Stripped Symbols:
    #        	Size    	File  Name
    <<dead>> 	0x00000008	[  1] _unused

Lines that do not fit the block they appear in are logged and skipped.
"""
from __future__ import annotations

import enum
import logging
import re
from typing import Iterable, Iterator, Optional

from .demangle import demangle as demangle_symbol
from .model import LinkMap, ObjectFile, Section, Symbol

logger = logging.getLogger(__name__)

FLAG_PATH = "# Path: "
FLAG_ARCH = "# Arch: "
FLAG_OBJECT_FILES = "# Object files:"
FLAG_SECTIONS = "# Sections:"
FLAG_SYMBOLS = "# Symbols:"
FLAG_DEAD_STRIPPED_SYMBOLS = "# Dead Stripped Symbols:"

MAX_U64 = (1 << 64) - 1
MAX_U32 = (1 << 32) - 1

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")
_DEC_DIGITS = re.compile(r"[0-9]+")


class ParsingPhase(enum.Enum):
    UNKNOWN = "unknown"
    OBJECT_FILES = "object_files"
    SECTIONS_HEADER = "sections_header"
    SECTIONS = "sections"
    SYMBOLS_HEADER = "symbols_header"
    SYMBOLS = "symbols"
    DEAD_STRIPPED_SYMBOLS_HEADER = "dead_stripped_symbols_header"
    DEAD_STRIPPED_SYMBOLS = "dead_stripped_symbols"


# Header phases swallow the column title row that follows the block header.
_AFTER_COLUMN_TITLES = {
    ParsingPhase.SECTIONS_HEADER: ParsingPhase.SECTIONS,
    ParsingPhase.SYMBOLS_HEADER: ParsingPhase.SYMBOLS,
    ParsingPhase.DEAD_STRIPPED_SYMBOLS_HEADER: ParsingPhase.DEAD_STRIPPED_SYMBOLS,
}


def parse_hex(text: str) -> int:
    """Parse an unsigned 64-bit hex value with an optional 0x prefix."""
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if not _HEX_DIGITS.fullmatch(text):
        raise ValueError(f"not a hex number: {text!r}")
    value = int(text, 16)
    if value > MAX_U64:
        raise ValueError(f"hex number out of range: {text!r}")
    return value


def parse_index(token: str) -> int:
    """Parse the `[  12` part of a `[  12] name` column into 12."""
    text = token[1:].strip()
    if not _DEC_DIGITS.fullmatch(text):
        raise ValueError(f"not an index: {text!r}")
    value = int(text)
    if value > MAX_U32:
        raise ValueError(f"index out of range: {text!r}")
    return value


def parse_object_file(line: str) -> Optional[ObjectFile]:
    parts = line.split("] ", 1)
    if len(parts) != 2:
        return None
    index_token, file_path = parts
    try:
        index = parse_index(index_token)
    except ValueError:
        logger.warning("Failed to parse object file index: %r", index_token)
        return None
    return ObjectFile(index, file_path)


def parse_section(line: str) -> Optional[Section]:
    parts = line.split("\t", 3)
    if len(parts) != 4:
        return None
    address_hex, size_hex, segment, section = parts
    try:
        address = parse_hex(address_hex)
        size = parse_hex(size_hex)
    except ValueError:
        logger.warning("Failed to parse address %r or size %r", address_hex, size_hex)
        return None
    return Section(address, size, segment, section)


def parse_symbol(line: str, demangle: bool, dead: bool = False) -> Optional[Symbol]:
    """
    Parse a tab separated `<address> <size> [<index>] <name>` symbol line.

    Dead stripped symbols have a placeholder instead of an address, so for
    them the first column is ignored and the address is recorded as 0.
    """
    parts = line.split("\t", 2)
    if len(parts) != 3:
        return None
    address_hex, size_hex, text = parts
    text_parts = text.split("] ", 1)
    if len(text_parts) != 2:
        return None
    index_token, name = text_parts

    try:
        address = 0 if dead else parse_hex(address_hex)
        size = parse_hex(size_hex)
    except ValueError:
        logger.warning("Failed to parse address %r or size %r", address_hex, size_hex)
        return None
    try:
        index = parse_index(index_token)
    except ValueError:
        logger.warning("Failed to parse symbol file index: %r", index_token)
        return None

    if demangle:
        name = demangle_symbol(name)
    return Symbol(address, size, index, name)


def _parse_header(linkmap: LinkMap, line: str) -> Optional[ParsingPhase]:
    if line.startswith(FLAG_PATH):
        linkmap.path = line[len(FLAG_PATH):]
    elif line.startswith(FLAG_ARCH):
        linkmap.arch = line[len(FLAG_ARCH):]
    elif line.startswith(FLAG_OBJECT_FILES):
        return ParsingPhase.OBJECT_FILES
    elif line.startswith(FLAG_SECTIONS):
        return ParsingPhase.SECTIONS_HEADER
    elif line.startswith(FLAG_SYMBOLS):
        return ParsingPhase.SYMBOLS_HEADER
    elif line.startswith(FLAG_DEAD_STRIPPED_SYMBOLS):
        return ParsingPhase.DEAD_STRIPPED_SYMBOLS_HEADER
    else:
        logger.warning("Unrecognized header line: %r", line)
        return ParsingPhase.UNKNOWN
    return None


def step(linkmap: LinkMap, phase: ParsingPhase, line: str, demangle: bool) -> ParsingPhase:
    """Feed one line to the parser in `phase` and return the next phase."""
    if phase in _AFTER_COLUMN_TITLES:
        return _AFTER_COLUMN_TITLES[phase]

    if phase is ParsingPhase.OBJECT_FILES:
        entry = parse_object_file(line)
        if entry is not None:
            linkmap.object_files.append(entry)
    elif phase is ParsingPhase.SECTIONS:
        entry = parse_section(line)
        if entry is not None:
            linkmap.sections.append(entry)
    elif phase is ParsingPhase.SYMBOLS:
        entry = parse_symbol(line, demangle)
        if entry is not None:
            linkmap.symbols.append(entry)
    elif phase is ParsingPhase.DEAD_STRIPPED_SYMBOLS:
        entry = parse_symbol(line, demangle, dead=True)
        if entry is not None:
            linkmap.dead_stripped_symbols.append(entry)

    # Data lines are offered to the block parser before being checked as headers.
    if line.startswith("#"):
        next_phase = _parse_header(linkmap, line)
        if next_phase is not None:
            return next_phase
    return phase


def parse_lines(lines: Iterable[str], demangle: bool = True) -> LinkMap:
    """Run the parser over already decoded lines."""
    linkmap = LinkMap()
    phase = ParsingPhase.UNKNOWN
    for line in lines:
        phase = step(linkmap, phase, _strip_newline(line), demangle)
    return linkmap


def _strip_newline(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    return line


def decode_lines(f: Iterable[bytes]) -> Iterator[str]:
    """Yield the UTF-8 lines of a binary file, dropping any line that does not decode."""
    for number, raw in enumerate(f, 1):
        try:
            yield raw.decode("utf-8")
        except UnicodeDecodeError:
            logger.debug("Skipping undecodable line %d", number)


def parse_linkmap(path, demangle: bool = True) -> LinkMap:
    """
    Parse the link map at `path`.

    Raises OSError if the file cannot be opened or read. Malformed lines
    never raise, they are logged and left out of the result.
    """
    with open(path, "rb") as f:
        return parse_lines(decode_lines(f), demangle)
