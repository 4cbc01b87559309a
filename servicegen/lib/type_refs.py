"""
Type references as written in a service description.

A TypeRef is the nominal, unresolved spelling of a type: a dotted name plus
optional generic arguments, e.g. ``Result[List[User], app.errors.Failure]``.
Classification into scalars, wrappers and composites happens in the
extractors; this module only knows how names are spelled.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


# Wrapper spellings recognized by the return-shape analyzer and mapper.
OPTIONAL_NAMES = frozenset({"Optional", "Option"})
OUTCOME_NAMES = frozenset({"Result", "Outcome"})
SEQUENCE_NAMES = frozenset({"List", "list", "Sequence", "Vec", "Set", "set", "Tuple", "tuple"})
LAZY_SEQUENCE_NAMES = frozenset({
    "Iterator",
    "AsyncIterator",
    "Iterable",
    "AsyncIterable",
    "Generator",
    "AsyncGenerator",
    "Stream",
})
MAPPING_NAMES = frozenset({"Dict", "dict", "Mapping", "Map", "HashMap"})
UNIT_NAMES = frozenset({"None", "NoneType", "Unit"})


@dataclass(frozen=True)
class TypeRef:
    name: str
    args: Tuple["TypeRef", ...] = ()

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self.name.split("."))

    @property
    def short_name(self) -> str:
        return self.segments[-1]

    @property
    def is_qualified(self) -> bool:
        return len(self.segments) > 1

    @property
    def first_arg(self) -> Optional["TypeRef"]:
        return self.args[0] if self.args else None

    def is_named(self, names) -> bool:
        return self.short_name in names

    @property
    def is_optional(self) -> bool:
        return self.is_named(OPTIONAL_NAMES) and len(self.args) == 1

    @property
    def is_unit(self) -> bool:
        return not self.args and self.name in UNIT_NAMES

    def unwrap_optional(self) -> "TypeRef":
        return self.args[0] if self.is_optional else self

    def render(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(a.render() for a in self.args)}]"

    def __str__(self) -> str:
        return self.render()


UNIT = TypeRef("None")


def parse_type_ref(text: str) -> TypeRef:
    """
    Parse a textual type spelling (``Dict[str, List[int]]``) into a TypeRef.

    Used by tests and by callers that build declarations without the grammar.
    """
    text = text.strip()
    ref, rest = _parse(text, 0)
    if text[rest:].strip():
        raise ValueError(f"Unexpected trailing text in type '{text}': '{text[rest:]}'")
    return ref


def _parse(text: str, pos: int):
    start = pos
    while pos < len(text) and (text[pos].isalnum() or text[pos] in "_."):
        pos += 1
    name = text[start:pos]
    if not name:
        raise ValueError(f"Expected a type name at offset {start} in '{text}'")
    pos = _skip_ws(text, pos)
    if pos < len(text) and text[pos] == "[":
        args = []
        pos += 1
        while True:
            pos = _skip_ws(text, pos)
            arg, pos = _parse(text, pos)
            args.append(arg)
            pos = _skip_ws(text, pos)
            if pos >= len(text):
                raise ValueError(f"Unclosed '[' in type '{text}'")
            if text[pos] == ",":
                pos += 1
                continue
            if text[pos] == "]":
                pos += 1
                break
            raise ValueError(f"Unexpected '{text[pos]}' in type '{text}'")
        return TypeRef(name, tuple(args)), _skip_ws(text, pos)
    return TypeRef(name), pos


def _skip_ws(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos
