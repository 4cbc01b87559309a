"""
Generation-time error taxonomy for servicegen.

Every problem detected while turning a service block into a ServiceDescriptor
is a ServiceGenError subclass carrying:
    - kind:     stable error kind name (e.g. "DuplicateRouteConflict")
    - message:  human readable description naming the offending construct
    - location: SourceLocation of the construct (may be empty)
    - hints:    valid alternatives / conflicting names, when applicable

Passes collect errors instead of stopping at the first one; the pipeline then
raises a single GenerationFailed listing all of them for the block.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence


@dataclass(frozen=True)
class SourceLocation:
    filename: Optional[str] = None
    line: Optional[int] = None
    col: Optional[int] = None

    @classmethod
    def from_textx(cls, loc: dict) -> "SourceLocation":
        if not loc:
            return cls()
        return cls(
            filename=loc.get("filename"),
            line=loc.get("line"),
            col=loc.get("col"),
        )

    def __str__(self) -> str:
        parts = [self.filename or "<string>"]
        if self.line is not None:
            parts.append(str(self.line))
            if self.col is not None:
                parts.append(str(self.col))
        return ":".join(parts)


UNKNOWN_LOCATION = SourceLocation()


class ServiceGenError(Exception):
    """Base class for all generation-time diagnostics."""

    kind = "ServiceGenError"

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hints: Optional[Sequence[str]] = None,
    ):
        self.message = message
        self.location = location or UNKNOWN_LOCATION
        self.hints = tuple(hints or ())
        super().__init__(self.format())

    def format(self) -> str:
        text = f"{self.location}: {self.kind}: {self.message}"
        if self.hints:
            text += "\n  Hint: " + "\n  Hint: ".join(self.hints)
        return text


class InvalidSignature(ServiceGenError):
    kind = "InvalidSignature"


class UnknownOverrideKey(ServiceGenError):
    kind = "UnknownOverrideKey"


class InvalidOverrideValue(ServiceGenError):
    kind = "InvalidOverrideValue"


class DuplicateName(ServiceGenError):
    kind = "DuplicateName"


class DuplicateRouteConflict(ServiceGenError):
    kind = "DuplicateRouteConflict"

    def __init__(self, message, location=None, hints=None, methods: Iterable[str] = ()):
        self.methods = tuple(methods)
        super().__init__(message, location, hints)


class ContextCollision(ServiceGenError):
    kind = "ContextCollision"


class MalformedPathTemplate(ServiceGenError):
    kind = "MalformedPathTemplate"


class SchemaMismatch(ServiceGenError):
    kind = "SchemaMismatch"

    def __init__(self, message, location=None, hints=None, differences: Iterable = ()):
        self.differences = tuple(differences)
        super().__init__(message, location, hints)


class StreamingUnsupportedByBackend(ServiceGenError):
    kind = "StreamingUnsupportedByBackend"


class UnknownBackend(ServiceGenError):
    kind = "UnknownBackend"


class GenerationFailed(Exception):
    """Raised once per service block with every independent issue found."""

    def __init__(self, block: str, errors: Sequence[ServiceGenError]):
        self.block = block
        self.errors: List[ServiceGenError] = list(errors)
        lines = [f"Generation failed for '{block}' with {len(self.errors)} error(s):"]
        lines.extend(f"- {e.format()}" for e in self.errors)
        super().__init__("\n".join(lines))

    @property
    def kinds(self) -> List[str]:
        return [e.kind for e in self.errors]


def raise_if_errors(block: str, errors: Sequence[ServiceGenError]) -> None:
    if errors:
        raise GenerationFailed(block, errors)
