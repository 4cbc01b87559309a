"""
Ambient context detection across a whole service block.

Two-pass strategy:
    pass 1  scan every parameter of every method for the fully-qualified
            context type (e.g. `servicegen.Context`);
    pass 2  if one was found, only the qualified spelling is injected and a
            bare `Context` is treated as an ordinary user type everywhere in
            the block; otherwise the bare name is injected too.

    # No collision - bare Context is ours
    def handler(self, ctx: Context) -> str                     # injected

    # Collision - the block also uses the qualified spelling
    def api_call(self, ctx: servicegen.Context) -> str         # injected
    def internal(self, ctx: Context) -> str                    # user type

The resolver never mutates its input; it returns the set of injectable
(method, parameter) pairs plus any errors.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Tuple

from servicegen.errors import ContextCollision


@dataclass(frozen=True)
class ContextResolution:
    has_qualified: bool
    injectable: FrozenSet[Tuple[str, str]] = frozenset()
    errors: Tuple[ContextCollision, ...] = field(default_factory=tuple)

    def is_injectable(self, method_name: str, param_name: str) -> bool:
        return (method_name, param_name) in self.injectable


def _qualified_segments(context_type: str):
    return tuple(context_type.split("."))


def is_qualified_context(type_ref, context_type: str) -> bool:
    """Check if a type spells the context type with its qualifying path."""
    qualified = _qualified_segments(context_type)
    segments = type_ref.segments
    if len(segments) < 2 or len(qualified) < 2 or type_ref.args:
        return False
    return segments[-len(qualified):] == qualified


def is_bare_context(type_ref, context_type: str) -> bool:
    """Check if a type is the unqualified short name of the context type."""
    return not type_ref.args and type_ref.name == _qualified_segments(context_type)[-1]


def should_inject_context(type_ref, has_qualified: bool, context_type: str) -> bool:
    if is_qualified_context(type_ref, context_type):
        return True
    if is_bare_context(type_ref, context_type):
        return not has_qualified
    return False


def has_qualified_context(methods, context_type: str) -> bool:
    """First pass: does any method in the block use the qualified spelling?"""
    return any(
        is_qualified_context(param.type_ref, context_type)
        for method in methods
        for param in method.params
    )


def resolve_context(methods, context_type: str) -> ContextResolution:
    """Second pass: decide injection for every parameter in the block."""
    has_qualified = has_qualified_context(methods, context_type)
    injectable = set()
    errors: List[ContextCollision] = []

    for method in methods:
        found = None
        for param in method.params:
            # An explicit role override is handled by the classifier
            if "role" in param.overrides:
                continue
            if not should_inject_context(param.type_ref, has_qualified, context_type):
                continue
            if found is not None:
                errors.append(ContextCollision(
                    f"Method '{method.name}' declares more than one context parameter "
                    f"('{found.name}' and '{param.name}').",
                    param.location,
                    hints=[
                        f"{context_type} is injected from request metadata; "
                        f"remove the duplicate parameter."
                    ],
                ))
                continue
            found = param
            injectable.add((method.name, param.name))

    return ContextResolution(
        has_qualified=has_qualified,
        injectable=frozenset(injectable),
        errors=tuple(errors),
    )
