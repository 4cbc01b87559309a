"""
Type/schema mapping: source type references -> target schema types.

Every target system has a fixed table for the canonical scalars plus rules for
the two composites (sequence, mapping), the unit type, declared records and
unknown custom types. Scalar spellings are canonicalized first so that `int`
and `i64` (or `float` and `f64`) map identically everywhere.
"""

from typing import Optional

from servicegen.lib.type_refs import (
    MAPPING_NAMES,
    OPTIONAL_NAMES,
    SEQUENCE_NAMES,
    TypeRef,
)

SCALAR_ALIASES = {
    "str": "str",
    "string": "str",
    "String": "str",
    "Text": "str",
    "bool": "bool",
    "i8": "i8",
    "i16": "i16",
    "i32": "i32",
    "i64": "i64",
    "int": "i64",
    "u8": "u8",
    "u16": "u16",
    "u32": "u32",
    "u64": "u64",
    "f32": "f32",
    "f64": "f64",
    "float": "f64",
    "bytes": "bytes",
}

SCALARS = ("str", "bool", "i8", "i16", "i32", "i64", "u8", "u16", "u32", "u64", "f32", "f64", "bytes")

INTEGERS = frozenset({"i8", "i16", "i32", "i64", "u8", "u16", "u32", "u64"})
UNSIGNED = frozenset({"u8", "u16", "u32", "u64"})
FLOATS = frozenset({"f32", "f64"})


def canonical_scalar(type_ref: TypeRef) -> Optional[str]:
    """Canonical scalar name for a type, or None when it is not a scalar."""
    if type_ref.args:
        return None
    return SCALAR_ALIASES.get(type_ref.name)


def is_sequence(type_ref: TypeRef) -> bool:
    return type_ref.is_named(SEQUENCE_NAMES) and bool(type_ref.args)


def is_mapping(type_ref: TypeRef) -> bool:
    return type_ref.is_named(MAPPING_NAMES) and len(type_ref.args) == 2


def strip_optional(type_ref: TypeRef) -> TypeRef:
    while type_ref.is_named(OPTIONAL_NAMES) and len(type_ref.args) == 1:
        type_ref = type_ref.args[0]
    return type_ref


class TypeMapper:
    """
    Base mapper; subclasses fill in one target system.

    `records` is the set of declared record names the backend registers as
    nested types. Anything else that is neither a scalar nor a composite is
    an unknown custom type and degrades to `unknown()`.
    """

    target = ""
    scalars = {}

    def __init__(self, records=()):
        self.records = frozenset(records)

    def map(self, type_ref: Optional[TypeRef]):
        if type_ref is None or type_ref.is_unit:
            return self.unit()
        type_ref = strip_optional(type_ref)
        scalar = canonical_scalar(type_ref)
        if scalar is not None:
            return self.scalar(scalar)
        if is_sequence(type_ref):
            return self.sequence(type_ref.args[0])
        if is_mapping(type_ref):
            return self.mapping(type_ref.args[0], type_ref.args[1])
        if not type_ref.args and type_ref.short_name in self.records:
            return self.record(type_ref.short_name)
        return self.unknown(type_ref)

    def scalar(self, name):
        return self.scalars[name]

    def sequence(self, item):
        raise NotImplementedError

    def mapping(self, key, value):
        raise NotImplementedError

    def record(self, name):
        return name

    def unknown(self, type_ref):
        raise NotImplementedError

    def unit(self):
        raise NotImplementedError


class JsonSchemaMapper(TypeMapper):
    target = "jsonschema"

    def __init__(self, records=(), ref_prefix="#/definitions/"):
        super().__init__(records)
        self.ref_prefix = ref_prefix

    def scalar(self, name):
        if name == "str":
            return {"type": "string"}
        if name == "bool":
            return {"type": "boolean"}
        if name == "bytes":
            return {"type": "string", "format": "byte"}
        if name == "f32":
            return {"type": "number", "format": "float"}
        if name == "f64":
            return {"type": "number", "format": "double"}
        fmt = "int64" if name in ("i64", "u32", "u64") else "int32"
        schema = {"type": "integer", "format": fmt}
        if name in UNSIGNED:
            schema["minimum"] = 0
        return schema

    def sequence(self, item):
        return {"type": "array", "items": self.map(item)}

    def mapping(self, key, value):
        return {"type": "object", "additionalProperties": self.map(value)}

    def record(self, name):
        return {"$ref": f"{self.ref_prefix}{name}"}

    def unknown(self, type_ref):
        return {"type": "object"}

    def unit(self):
        return {"type": "object", "additionalProperties": False}


class ProtobufMapper(TypeMapper):
    target = "protobuf"
    scalars = {
        "str": "string",
        "bool": "bool",
        "i8": "int32",
        "i16": "int32",
        "i32": "int32",
        "i64": "int64",
        "u8": "uint32",
        "u16": "uint32",
        "u32": "uint32",
        "u64": "uint64",
        "f32": "float",
        "f64": "double",
        "bytes": "bytes",
    }

    def sequence(self, item):
        inner = self.map(item)
        # Nested repeated/map fields are not expressible in proto3
        if inner.startswith(("repeated ", "map<")):
            return "repeated google.protobuf.ListValue"
        return f"repeated {inner}"

    def mapping(self, key, value):
        key_type = self.map(key)
        if key_type not in ("string", "int32", "int64", "uint32", "uint64", "bool"):
            key_type = "string"
        value_type = self.map(value)
        if value_type.startswith(("repeated ", "map<")):
            value_type = "google.protobuf.Value"
        return f"map<{key_type}, {value_type}>"

    def unknown(self, type_ref):
        return "google.protobuf.Struct"

    def unit(self):
        return "google.protobuf.Empty"


class CapnpMapper(TypeMapper):
    target = "capnp"
    scalars = {
        "str": "Text",
        "bool": "Bool",
        "i8": "Int8",
        "i16": "Int16",
        "i32": "Int32",
        "i64": "Int64",
        "u8": "UInt8",
        "u16": "UInt16",
        "u32": "UInt32",
        "u64": "UInt64",
        "f32": "Float32",
        "f64": "Float64",
        "bytes": "Data",
    }

    def sequence(self, item):
        return f"List({self.map(item)})"

    def mapping(self, key, value):
        # Cap'n Proto has no map type
        return "AnyPointer"

    def unknown(self, type_ref):
        return "AnyPointer"

    def unit(self):
        return "Void"


class ThriftMapper(TypeMapper):
    target = "thrift"
    scalars = {
        "str": "string",
        "bool": "bool",
        "i8": "byte",
        "i16": "i16",
        "i32": "i32",
        "i64": "i64",
        "u8": "i16",
        "u16": "i32",
        "u32": "i64",
        "u64": "i64",
        "f32": "double",
        "f64": "double",
        "bytes": "binary",
    }

    def sequence(self, item):
        return f"list<{self.map(item)}>"

    def mapping(self, key, value):
        return f"map<{self.map(key)}, {self.map(value)}>"

    def unknown(self, type_ref):
        return "binary"

    def unit(self):
        return "void"


class GraphQLMapper(TypeMapper):
    target = "graphql"
    scalars = {
        "str": "String",
        "bool": "Boolean",
        "i8": "Int",
        "i16": "Int",
        "i32": "Int",
        "i64": "Int",
        "u8": "Int",
        "u16": "Int",
        "u32": "Int",
        "u64": "Int",
        "f32": "Float",
        "f64": "Float",
        "bytes": "String",
    }

    def __init__(self, records=(), record_suffix=""):
        super().__init__(records)
        # Input positions reference `<Record>Input` types
        self.record_suffix = record_suffix

    def record(self, name):
        return f"{name}{self.record_suffix}"

    def map_required(self, type_ref):
        """Non-null spelling unless the source type is optional."""
        rendered = self.map(type_ref)
        if type_ref is None or type_ref.is_unit or type_ref.is_optional:
            return rendered
        return f"{rendered}!"

    def sequence(self, item):
        return f"[{self.map_required(item)}]"

    def mapping(self, key, value):
        return "JSON"

    def unknown(self, type_ref):
        return "JSON"

    def unit(self):
        return "Boolean"


class SmithyMapper(TypeMapper):
    target = "smithy"
    scalars = {
        "str": "String",
        "bool": "Boolean",
        "i8": "Byte",
        "i16": "Short",
        "i32": "Integer",
        "i64": "Long",
        "u8": "Short",
        "u16": "Integer",
        "u32": "Long",
        "u64": "Long",
        "f32": "Float",
        "f64": "Double",
        "bytes": "Blob",
    }

    def __init__(self, records=()):
        super().__init__(records)
        # Named collection shapes created while mapping: name -> (kind, members)
        self.collections = {}

    def sequence(self, item):
        member = self.map(item)
        name = f"{member}List"
        self.collections.setdefault(name, ("list", (member,)))
        return name

    def mapping(self, key, value):
        member = self.map(value)
        name = f"{member}Map"
        self.collections.setdefault(name, ("map", ("String", member)))
        return name

    def unknown(self, type_ref):
        return "Document"

    def unit(self):
        return "Unit"


class PythonMapper(TypeMapper):
    """Python annotations used by generated FastAPI, click and dispatch code."""

    target = "python"
    scalars = {
        "str": "str",
        "bool": "bool",
        "i8": "int",
        "i16": "int",
        "i32": "int",
        "i64": "int",
        "u8": "int",
        "u16": "int",
        "u32": "int",
        "u64": "int",
        "f32": "float",
        "f64": "float",
        "bytes": "bytes",
    }

    def map_annotation(self, type_ref):
        """Like map(), but keeps the Optional wrapper."""
        if type_ref is not None and type_ref.is_optional:
            return f"Optional[{self.map(type_ref.args[0])}]"
        return self.map(type_ref)

    def sequence(self, item):
        return f"List[{self.map_annotation(item)}]"

    def mapping(self, key, value):
        return f"Dict[{self.map(key)}, {self.map_annotation(value)}]"

    def unknown(self, type_ref):
        return "Any"

    def unit(self):
        return "None"


MAPPERS = {
    mapper.target: mapper
    for mapper in (
        JsonSchemaMapper,
        ProtobufMapper,
        CapnpMapper,
        ThriftMapper,
        GraphQLMapper,
        SmithyMapper,
        PythonMapper,
    )
}


def get_mapper(target: str, records=(), **kwargs) -> TypeMapper:
    try:
        mapper_cls = MAPPERS[target]
    except KeyError:
        raise ValueError(f"No type mapper for target '{target}'") from None
    return mapper_cls(records, **kwargs)


def map_type(type_ref: Optional[TypeRef], target: str, records=()):
    """Map a single type reference for `target`."""
    return get_mapper(target, records).map(type_ref)


def referenced_records(type_ref: Optional[TypeRef], records):
    """Names of declared records a type refers to, in first-seen order."""
    found = []

    def walk(ref):
        if ref is None:
            return
        if not ref.args and ref.short_name in records and ref.short_name not in found:
            found.append(ref.short_name)
        for arg in ref.args:
            walk(arg)

    walk(type_ref)
    return found
