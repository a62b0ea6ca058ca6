"""Records produced by the link map parser."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field


@dataclass(frozen=True)
class ObjectFile:
    index: int
    path: str


@dataclass(frozen=True)
class Section:
    address: int
    size: int
    segment: str
    section: str


@dataclass(frozen=True)
class Symbol:
    # Dead stripped symbols have no final address, it is always 0 for them.
    address: int
    size: int
    file_index: int
    name: str


@dataclass
class LinkMap:
    """Everything read from one link map, in input order."""

    path: str = ""
    arch: str = ""
    object_files: list[ObjectFile] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)
    symbols: list[Symbol] = field(default_factory=list)
    dead_stripped_symbols: list[Symbol] = field(default_factory=list)

    @property
    def live_symbols(self) -> list[Symbol]:
        return self.symbols

    @property
    def dead_symbols(self) -> list[Symbol]:
        return self.dead_stripped_symbols

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "arch": self.arch,
            "object_files": [asdict(o) for o in self.object_files],
            "sections": [asdict(s) for s in self.sections],
            "symbols": [asdict(s) for s in self.symbols],
            "dead_stripped_symbols": [asdict(s) for s in self.dead_stripped_symbols],
        }
