"""Size summaries over a parsed link map."""
from __future__ import annotations

from collections import Counter

from .model import LinkMap, Symbol


def human(n: int) -> str:
    if n >= 1024 * 1024:
        return f"{n / (1024 * 1024):.2f} MB"
    if n >= 1024:
        return f"{n / 1024:.2f} KB"
    return f"{n} B"


def section_totals(linkmap: LinkMap) -> list[tuple[str, str, int]]:
    """(segment, section, size) for every section, largest first."""
    totals = Counter()
    for s in linkmap.sections:
        totals[(s.segment, s.section)] += s.size
    return [(segment, section, size) for (segment, section), size in totals.most_common()]


def object_file_sizes(linkmap: LinkMap, dead: bool = False) -> list[tuple[str, int]]:
    """
    Sum symbol sizes per object file, largest first.

    Symbols whose file index was never declared in the object files block
    are grouped under "<unknown [index]>".
    """
    paths = {o.index: o.path for o in linkmap.object_files}
    symbols = linkmap.dead_stripped_symbols if dead else linkmap.symbols
    sizes = Counter()
    for sym in symbols:
        path = paths.get(sym.file_index, f"<unknown [{sym.file_index}]>")
        sizes[path] += sym.size
    return sizes.most_common()


def top_symbols(linkmap: LinkMap, count: int, dead: bool = False) -> list[Symbol]:
    symbols = linkmap.dead_stripped_symbols if dead else linkmap.symbols
    return sorted(symbols, key=lambda s: s.size, reverse=True)[:count]


def total_size(symbols) -> int:
    return sum(s.size for s in symbols)
