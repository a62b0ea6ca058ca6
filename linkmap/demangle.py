"""
Best-effort symbol demangling for link map names.

Handles the common subset of Itanium C++ names (as emitted on Mach-O, with
or without the extra leading underscore) and legacy Rust names:

  __ZN3foo3barEv                     -> foo::bar()
  __ZNK3Foo4sizeEv                   -> Foo::size() const
  _ZN4core3fmt5write17h0123456789abcdefE -> core::fmt::write

Anything that is not parsed to the end is returned unchanged.
"""
from __future__ import annotations

import re

_BUILTIN_TYPES = {
    "v": "void",
    "b": "bool",
    "c": "char",
    "a": "signed char",
    "h": "unsigned char",
    "s": "short",
    "t": "unsigned short",
    "i": "int",
    "j": "unsigned int",
    "l": "long",
    "m": "unsigned long",
    "x": "long long",
    "y": "unsigned long long",
    "w": "wchar_t",
    "f": "float",
    "d": "double",
    "e": "long double",
    "z": "...",
}

_QUALIFIERS = {
    "P": "*",
    "R": "&",
    "O": "&&",
    "K": " const",
}

_RUST_HASH = re.compile(r"^h[0-9a-f]{16}$")
_RUST_ESCAPE = re.compile(r"\$([A-Za-z0-9]+)\$")
_RUST_ESCAPES = {
    "SP": "@",
    "BP": "*",
    "RF": "&",
    "LT": "<",
    "GT": ">",
    "LP": "(",
    "RP": ")",
    "C": ",",
}


class _Unsupported(Exception):
    pass


def demangle(name: str) -> str:
    """Return the readable form of `name`, or `name` itself if it is not mangled."""
    mangled = name[1:] if name.startswith("__Z") else name
    if not mangled.startswith("_Z"):
        return name
    try:
        result = _Demangler(mangled[2:]).encoding()
    except (_Unsupported, IndexError, ValueError):
        return name
    # a result that still looks mangled would be rewritten again
    if not result or result.startswith(("_Z", "__Z")):
        return name
    return result


class _Demangler:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def peek(self, n=1) -> str:
        return self.text[self.pos:self.pos + n]

    def take(self, n=1) -> str:
        if self.pos + n > len(self.text):
            raise _Unsupported(self.text)
        chunk = self.text[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def encoding(self) -> str:
        components, const_method = self.name()
        if self.at_end():
            if len(components) > 1 and _RUST_HASH.match(components[-1]):
                return "::".join(_rust_component(c) for c in components[:-1])
            return "::".join(components)

        params = []
        while not self.at_end():
            params.append(self.type())
        if params == ["void"]:
            params = []
        result = "::".join(components) + "(" + ", ".join(params) + ")"
        if const_method:
            result += " const"
        return result

    def name(self):
        """Parse a (possibly nested) name, returning its components and method constness."""
        if self.peek() == "N":
            self.take()
            const_method = False
            while self.peek() in ("K", "V", "r"):
                if self.take() == "K":
                    const_method = True
            components = []
            if self.peek(2) == "St":
                self.take(2)
                components.append("std")
            while self.peek() != "E":
                if self.at_end():
                    raise _Unsupported(self.text)
                components.append(self.component(components))
            self.take()
            if not components:
                raise _Unsupported(self.text)
            return components, const_method

        components = []
        if self.peek(2) == "St":
            self.take(2)
            components.append("std")
        components.append(self.source_name())
        return components, False

    def component(self, previous) -> str:
        head = self.peek()
        if head in ("C", "D") and self.peek(2)[1:] in ("0", "1", "2", "3"):
            self.take(2)
            if not previous:
                raise _Unsupported(self.text)
            base = previous[-1]
            return base if head == "C" else "~" + base
        return self.source_name()

    def source_name(self) -> str:
        digits = ""
        while self.peek().isdigit():
            digits += self.take()
        if not digits or digits.startswith("0"):
            raise _Unsupported(self.text)
        return self.take(int(digits))

    def type(self) -> str:
        # qualifiers wrap the type that follows them, innermost last
        suffixes = []
        while self.peek() in _QUALIFIERS:
            suffixes.append(_QUALIFIERS[self.take()])
        result = self.base_type()
        for suffix in reversed(suffixes):
            result += suffix
        return result

    def base_type(self) -> str:
        code = self.peek()
        if code in _BUILTIN_TYPES:
            self.take()
            return _BUILTIN_TYPES[code]
        if code == "N" or code.isdigit() or self.peek(2) == "St":
            components, _ = self.name()
            return "::".join(components)
        raise _Unsupported(self.text)


def _rust_component(component: str) -> str:
    if component.startswith("_$"):
        component = component[1:]
    component = component.replace("..", "::")
    return _RUST_ESCAPE.sub(_rust_escape, component)


def _rust_escape(match) -> str:
    code = match.group(1)
    if code in _RUST_ESCAPES:
        return _RUST_ESCAPES[code]
    if code.startswith("u"):
        try:
            value = int(code[1:], 16)
        except ValueError:
            return match.group(0)
        if 0xD800 <= value <= 0xDFFF or value > 0x10FFFF:
            return match.group(0)
        return chr(value)
    return match.group(0)
