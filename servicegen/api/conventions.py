"""
Naming convention engine.

A single ordered prefix table decides the operation kind and HTTP verb of a
method; every per-backend name (path, CLI subcommand, RPC names, GraphQL
field and kind) is derived from it plus the classified parameter roles.

    create_user(name, email)  -> creation          POST   /users
    get_user(id)              -> lookup            GET    /users/{id}
    list_users(limit)         -> collection query  GET    /users
    ping()                    -> generic call      POST   /rpc/ping

A @route override replaces the inferred (verb, path, visibility) tuple as a
whole: members it leaves out take the override defaults, not the inferred
values.
"""

import re
from dataclasses import dataclass
from typing import Optional

from servicegen.api.extractors.signature_capture import split_docstring
from servicegen.lib.descriptors import (
    OperationInfo,
    OperationKind,
    Role,
    ShapeKind,
    Visibility,
    freeze,
)


@dataclass(frozen=True)
class Convention:
    prefix: str
    kind: OperationKind
    verb: str


CONVENTIONS = (
    Convention("create_", OperationKind.CREATION, "POST"),
    Convention("add_", OperationKind.CREATION, "POST"),
    Convention("new_", OperationKind.CREATION, "POST"),
    Convention("get_", OperationKind.LOOKUP, "GET"),
    Convention("fetch_", OperationKind.LOOKUP, "GET"),
    Convention("read_", OperationKind.LOOKUP, "GET"),
    Convention("list_", OperationKind.COLLECTION_QUERY, "GET"),
    Convention("find_", OperationKind.COLLECTION_QUERY, "GET"),
    Convention("search_", OperationKind.COLLECTION_QUERY, "GET"),
    Convention("update_", OperationKind.MUTATION, "PUT"),
    Convention("set_", OperationKind.MUTATION, "PUT"),
    Convention("patch_", OperationKind.MUTATION, "PATCH"),
    Convention("modify_", OperationKind.MUTATION, "PATCH"),
    Convention("delete_", OperationKind.DELETION, "DELETE"),
    Convention("remove_", OperationKind.DELETION, "DELETE"),
)

GENERIC_VERB = "POST"
RPC_ROOT = "/rpc"

# Defaults for members a @route override does not name
OVERRIDE_DEFAULT_VERB = "POST"
OVERRIDE_DEFAULT_VISIBILITY = Visibility.NORMAL


# ------------------------------------------------------------------------------
# Case helpers

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def split_words(name: str):
    name = _WORD_BOUNDARY.sub("_", name)
    return [w for w in re.split(r"[_\-\s]+", name) if w]


def kebab_case(name: str) -> str:
    return "-".join(w.lower() for w in split_words(name))


def snake_case(name: str) -> str:
    return "_".join(w.lower() for w in split_words(name))


def pascal_case(name: str) -> str:
    return "".join(w[:1].upper() + w[1:] for w in split_words(name))


def camel_case(name: str) -> str:
    pascal = pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def pluralize(word: str) -> str:
    return word if word.endswith("s") else f"{word}s"


# ------------------------------------------------------------------------------
# Inference

def match_convention(method_name: str) -> Optional[Convention]:
    """Longest matching prefix wins; None for generic calls."""
    best = None
    for convention in CONVENTIONS:
        # A bare prefix ("get_") names no resource
        if method_name.startswith(convention.prefix) and len(method_name) > len(convention.prefix):
            if best is None or len(convention.prefix) > len(best.prefix):
                best = convention
    return best


def infer_kind(method_name: str) -> OperationKind:
    convention = match_convention(method_name)
    return convention.kind if convention else OperationKind.GENERIC_CALL


def infer_verb(method_name: str) -> str:
    convention = match_convention(method_name)
    return convention.verb if convention else GENERIC_VERB


def resource_name(method_name: str) -> str:
    """`get_user_profile` -> `user-profiles`; generic calls keep the method name."""
    convention = match_convention(method_name)
    if convention is None:
        return method_name
    return pluralize(kebab_case(method_name[len(convention.prefix):]))


def base_path(method_name: str) -> str:
    if match_convention(method_name) is None:
        return f"{RPC_ROOT}/{method_name}"
    return f"/{resource_name(method_name)}"


def identifier_slots(params) -> str:
    return "".join(f"/{{{p.wire_name}}}" for p in params if p.role == Role.PATH_IDENTIFIER)


def join_prefix(prefix: Optional[str], path: str) -> str:
    if not prefix:
        return path
    return prefix.rstrip("/") + path


@dataclass(frozen=True)
class RouteBasis:
    """The (verb, path, visibility) tuple before parameter roles are known."""

    kind: OperationKind
    verb: str
    visibility: Visibility
    explicit_path: Optional[str] = None
    is_overridden: bool = False


def route_basis(method) -> RouteBasis:
    kind = infer_kind(method.name)
    route = {k: method.overrides[k] for k in ("verb", "path", "visibility") if k in method.overrides}
    if not route:
        return RouteBasis(kind, infer_verb(method.name), Visibility.NORMAL)
    return RouteBasis(
        kind=kind,
        verb=route.get("verb", OVERRIDE_DEFAULT_VERB),
        visibility=Visibility(route.get("visibility", OVERRIDE_DEFAULT_VISIBILITY.value)),
        explicit_path=route.get("path"),
        is_overridden=True,
    )


def resolve_path(method, basis: RouteBasis, prefix: Optional[str] = None) -> str:
    """Final path of a classified method."""
    if basis.explicit_path is not None:
        return join_prefix(prefix, basis.explicit_path)
    if basis.is_overridden:
        # Path left out of the override: the override default, not the convention
        root = f"{RPC_ROOT}/{method.name}"
    else:
        root = base_path(method.name)
    return join_prefix(prefix, root + identifier_slots(method.params))


def default_status(kind: OperationKind, shape) -> int:
    if kind == OperationKind.CREATION:
        return 201
    if kind == OperationKind.DELETION and shape is not None and shape.kind == ShapeKind.UNIT:
        return 204
    return 200


def graphql_kind(kind: OperationKind, shape) -> str:
    if shape is not None and shape.is_streaming:
        return "subscription"
    if kind in (OperationKind.LOOKUP, OperationKind.COLLECTION_QUERY):
        return "query"
    return "mutation"


def describe(method):
    """(summary, description) from @doc overrides, falling back to the docstring."""
    summary, description = split_docstring(method.documentation)
    return (
        method.overrides.get("summary", summary),
        method.overrides.get("description", description),
    )


def resolve_operation(method, basis: RouteBasis, prefix: Optional[str] = None) -> OperationInfo:
    """Build the OperationInfo of a method whose roles and shape are known."""
    summary, description = describe(method)
    return OperationInfo(
        method_name=method.name,
        kind=basis.kind,
        verb=basis.verb,
        path=resolve_path(method, basis, prefix),
        resource=resource_name(method.name),
        visibility=basis.visibility,
        status_code=method.overrides.get("status_code", default_status(basis.kind, method.return_shape)),
        content_type=method.overrides.get("content_type"),
        extra_headers=freeze(method.overrides.get("extra_headers")),
        summary=summary,
        description=description,
        cli_command=kebab_case(method.name),
        rpc_name=pascal_case(method.name),
        capnp_name=camel_case(method.name),
        graphql_field=camel_case(method.name),
        graphql_kind=graphql_kind(basis.kind, method.return_shape),
        is_overridden=basis.is_overridden,
    )
