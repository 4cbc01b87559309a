"""Extract service declarations and records from the parsed description model."""

from textx import get_children_of_type, get_location

from servicegen.errors import SourceLocation
from servicegen.lib.descriptors import (
    Decorator,
    FieldDescriptor,
    MethodDeclaration,
    ParamDeclaration,
    ParamPattern,
    RecordDescriptor,
    ServiceDeclaration,
)
from servicegen.lib.type_refs import TypeRef


def _loc(obj, fallback_owner=None) -> SourceLocation:
    try:
        return SourceLocation.from_textx(get_location(obj))
    except Exception:
        if fallback_owner is not None:
            try:
                return SourceLocation.from_textx(get_location(fallback_owner))
            except Exception:
                pass
    return SourceLocation()


def _doc(node):
    """textX initializes a missing Docstring to '' - normalize to None."""
    doc = getattr(node, "doc", None)
    return doc or None


def get_services(model):
    """Extract all Service nodes from the model."""
    return list(get_children_of_type("Service", model))


def get_records(model):
    """Extract all records declared in the model as RecordDescriptors."""
    records = []
    for rec in get_children_of_type("Record", model):
        fields = tuple(
            FieldDescriptor(
                name=f.name,
                type_ref=type_ref_from_node(f.type),
                documentation=_doc(f),
            )
            for f in rec.fields
        )
        records.append(
            RecordDescriptor(
                name=rec.name,
                fields=fields,
                documentation=_doc(rec),
                location=_loc(rec),
            )
        )
    return records


def type_ref_from_node(node):
    """Convert a textX TypeRef node into an immutable TypeRef."""
    if node is None:
        return None
    args = tuple(type_ref_from_node(a) for a in (getattr(node, "args", None) or []))
    return TypeRef(node.name, args)


def literal_from_node(node):
    """Convert a textX Value node into a plain Python literal."""
    if node is None or isinstance(node, (str, int, float, bool)):
        return node
    cls = type(node).__name__
    if cls == "NoneValue":
        return None
    if cls == "ListValue":
        return [literal_from_node(v) for v in node.items]
    if cls == "DictValue":
        return {e.key: literal_from_node(e.value) for e in node.entries}
    raise ValueError(f"Unsupported literal node: {cls}")


def _decorators(nodes):
    return tuple(
        Decorator(
            name=d.name,
            arguments={a.key: literal_from_node(a.value) for a in d.args},
            location=_loc(d),
        )
        for d in nodes or []
    )


def _param_declaration(node, method):
    location = _loc(node, method)
    decorators = _decorators(node.decorators)

    if getattr(node, "tuple", None):
        return ParamDeclaration(
            name=", ".join(node.tuple.names),
            type_ref=type_ref_from_node(node.type),
            pattern=ParamPattern.TUPLE,
            decorators=decorators,
            location=location,
        )

    star = getattr(node, "star", None)
    if star:
        pattern = ParamPattern.VAR_KEYWORD if star == "**" else ParamPattern.VAR_POSITIONAL
        return ParamDeclaration(
            name=node.name,
            type_ref=type_ref_from_node(node.type),
            pattern=pattern,
            decorators=decorators,
            location=location,
        )

    default = getattr(node, "default", None)
    return ParamDeclaration(
        name=node.name,
        type_ref=type_ref_from_node(node.type),
        default=literal_from_node(default.value) if default else None,
        decorators=decorators,
        location=location,
    )


def method_declaration(node):
    """Convert a textX Method node into a MethodDeclaration."""
    return MethodDeclaration(
        name=node.name,
        params=tuple(_param_declaration(p, node) for p in node.params),
        return_type=type_ref_from_node(getattr(node, "returns", None)),
        is_async=bool(node.is_async),
        documentation=_doc(node),
        decorators=_decorators(node.decorators),
        location=_loc(node),
    )


def service_declaration(node, records=()):
    """Convert a textX Service node into a ServiceDeclaration."""
    return ServiceDeclaration(
        name=node.name,
        methods=tuple(method_declaration(m) for m in node.methods),
        documentation=_doc(node),
        decorators=_decorators(node.decorators),
        records=tuple(records),
        location=_loc(node),
    )


def get_service_declarations(model):
    """Return one ServiceDeclaration per service block, sharing the model's records."""
    records = get_records(model)
    return [service_declaration(s, records) for s in get_services(model)]
