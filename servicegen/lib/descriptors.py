"""
Data model for servicegen.

Two layers live here:

Declarations (input contract)
    MethodDeclaration / ParamDeclaration / Decorator / ServiceDeclaration are
    what a front end hands to the core: names, docs, raw parameter patterns,
    declared types and unvalidated decorators. The textX grammar produces
    them, but tests and other front ends may build them directly.

Descriptors (output contract)
    ServiceDescriptor / MethodDescriptor / ParamDescriptor / OperationInfo are
    the immutable, backend-agnostic model every emitter consumes.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from servicegen.errors import SourceLocation, UNKNOWN_LOCATION
from servicegen.lib.type_refs import TypeRef


def freeze(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


# ------------------------------------------------------------------------------
# Declarations

class ParamPattern(str, Enum):
    NAME = "name"
    TUPLE = "tuple"
    VAR_POSITIONAL = "varargs"
    VAR_KEYWORD = "kwargs"


@dataclass(frozen=True)
class Decorator:
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)
    location: SourceLocation = UNKNOWN_LOCATION


@dataclass(frozen=True)
class ParamDeclaration:
    name: str
    type_ref: Optional[TypeRef] = None
    pattern: ParamPattern = ParamPattern.NAME
    default: Any = None
    decorators: Tuple[Decorator, ...] = ()
    location: SourceLocation = UNKNOWN_LOCATION

    @property
    def is_receiver(self) -> bool:
        return self.pattern == ParamPattern.NAME and self.name == "self"


@dataclass(frozen=True)
class MethodDeclaration:
    name: str
    params: Tuple[ParamDeclaration, ...] = ()
    return_type: Optional[TypeRef] = None
    is_async: bool = False
    documentation: Optional[str] = None
    decorators: Tuple[Decorator, ...] = ()
    location: SourceLocation = UNKNOWN_LOCATION

    @property
    def has_receiver(self) -> bool:
        return bool(self.params) and self.params[0].is_receiver


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    type_ref: TypeRef
    documentation: Optional[str] = None

    @property
    def is_optional(self) -> bool:
        return self.type_ref.is_optional


@dataclass(frozen=True)
class RecordDescriptor:
    name: str
    fields: Tuple[FieldDescriptor, ...] = ()
    documentation: Optional[str] = None
    location: SourceLocation = UNKNOWN_LOCATION


@dataclass(frozen=True)
class ServiceDeclaration:
    name: str
    methods: Tuple[MethodDeclaration, ...] = ()
    documentation: Optional[str] = None
    decorators: Tuple[Decorator, ...] = ()
    records: Tuple[RecordDescriptor, ...] = ()
    location: SourceLocation = UNKNOWN_LOCATION


# ------------------------------------------------------------------------------
# Descriptors

class Role(str, Enum):
    PATH_IDENTIFIER = "path"
    QUERY_VALUE = "query"
    HEADER_VALUE = "header"
    STRUCTURED_BODY = "body"
    AMBIENT_CONTEXT = "context"
    UNCLASSIFIED = "unclassified"


class ShapeKind(str, Enum):
    PLAIN_VALUE = "plain"
    OPTIONAL_VALUE = "optional"
    OUTCOME_SUM = "outcome"
    SEQUENCE = "sequence"
    UNIT = "unit"
    LAZY_SEQUENCE = "stream"


@dataclass(frozen=True)
class ReturnShape:
    kind: ShapeKind
    value_type: Optional[TypeRef] = None
    error_type: Optional[TypeRef] = None

    @classmethod
    def plain(cls, value_type: TypeRef) -> "ReturnShape":
        return cls(ShapeKind.PLAIN_VALUE, value_type)

    @classmethod
    def optional(cls, value_type: TypeRef) -> "ReturnShape":
        return cls(ShapeKind.OPTIONAL_VALUE, value_type)

    @classmethod
    def outcome(cls, success: TypeRef, failure: TypeRef) -> "ReturnShape":
        return cls(ShapeKind.OUTCOME_SUM, success, failure)

    @classmethod
    def sequence(cls, item_type: TypeRef) -> "ReturnShape":
        return cls(ShapeKind.SEQUENCE, item_type)

    @classmethod
    def lazy_sequence(cls, item_type: TypeRef) -> "ReturnShape":
        return cls(ShapeKind.LAZY_SEQUENCE, item_type)

    @classmethod
    def unit(cls) -> "ReturnShape":
        return cls(ShapeKind.UNIT)

    @property
    def is_streaming(self) -> bool:
        return self.kind == ShapeKind.LAZY_SEQUENCE

    @property
    def is_unit(self) -> bool:
        return self.kind == ShapeKind.UNIT

    def describe(self) -> str:
        if self.kind == ShapeKind.UNIT:
            return "Unit"
        if self.kind == ShapeKind.OUTCOME_SUM:
            return f"OutcomeSum<{self.value_type}, {self.error_type}>"
        label = {
            ShapeKind.PLAIN_VALUE: "PlainValue",
            ShapeKind.OPTIONAL_VALUE: "OptionalValue",
            ShapeKind.SEQUENCE: "Sequence",
            ShapeKind.LAZY_SEQUENCE: "LazySequence",
        }[self.kind]
        return f"{label}<{self.value_type}>"


class OperationKind(str, Enum):
    CREATION = "creation"
    LOOKUP = "lookup"
    COLLECTION_QUERY = "collection_query"
    MUTATION = "mutation"
    DELETION = "deletion"
    GENERIC_CALL = "generic_call"


class Visibility(str, Enum):
    NORMAL = "normal"
    SUPPRESSED = "suppressed"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class ParamDescriptor:
    name: str
    type_ref: TypeRef
    role: Role
    is_optional: bool = False
    wire_name: str = ""
    default_value: Any = None
    overrides: Mapping[str, Any] = field(default_factory=lambda: freeze({}))
    location: SourceLocation = UNKNOWN_LOCATION

    def __post_init__(self):
        if not self.wire_name:
            object.__setattr__(self, "wire_name", self.name)

    @property
    def value_type(self) -> TypeRef:
        return self.type_ref.unwrap_optional()

    @property
    def is_required(self) -> bool:
        return not self.is_optional and self.default_value is None

    @property
    def is_injected(self) -> bool:
        return self.role == Role.AMBIENT_CONTEXT


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    params: Tuple[ParamDescriptor, ...]
    return_shape: Optional[ReturnShape]
    is_asynchronous: bool = False
    documentation: Optional[str] = None
    overrides: Mapping[str, Any] = field(default_factory=lambda: freeze({}))
    return_type: Optional[TypeRef] = None
    location: SourceLocation = UNKNOWN_LOCATION

    @property
    def caller_params(self) -> Tuple[ParamDescriptor, ...]:
        """Parameters visible to callers (ambient context excluded)."""
        return tuple(p for p in self.params if not p.is_injected)

    @property
    def context_param(self) -> Optional[ParamDescriptor]:
        for p in self.params:
            if p.is_injected:
                return p
        return None

    def params_with_role(self, role: Role) -> Tuple[ParamDescriptor, ...]:
        return tuple(p for p in self.params if p.role == role)


@dataclass(frozen=True)
class OperationInfo:
    method_name: str
    kind: OperationKind
    verb: str
    path: str
    resource: str
    visibility: Visibility = Visibility.NORMAL
    status_code: int = 200
    content_type: Optional[str] = None
    extra_headers: Mapping[str, str] = field(default_factory=lambda: freeze({}))
    summary: Optional[str] = None
    description: Optional[str] = None
    cli_command: str = ""
    rpc_name: str = ""
    capnp_name: str = ""
    graphql_field: str = ""
    graphql_kind: str = "mutation"
    is_overridden: bool = False

    @property
    def is_suppressed(self) -> bool:
        return self.visibility == Visibility.SUPPRESSED

    @property
    def in_schema(self) -> bool:
        return self.visibility == Visibility.NORMAL


@dataclass(frozen=True)
class ServiceDescriptor:
    name: str
    methods: Tuple[MethodDescriptor, ...]
    operations: Tuple[OperationInfo, ...] = ()
    documentation: Optional[str] = None
    options: Mapping[str, Mapping[str, Any]] = field(default_factory=lambda: freeze({}))
    records: Tuple[RecordDescriptor, ...] = ()
    has_qualified_context: bool = False
    location: SourceLocation = UNKNOWN_LOCATION

    def get_method(self, name: str) -> MethodDescriptor:
        for m in self.methods:
            if m.name == name:
                return m
        raise KeyError(name)

    def get_operation(self, name: str) -> OperationInfo:
        for op in self.operations:
            if op.method_name == name:
                return op
        raise KeyError(name)

    def get_record(self, name: str) -> Optional[RecordDescriptor]:
        for r in self.records:
            if r.name == name:
                return r
        return None

    def option(self, group: str, key: str, default: Any = None) -> Any:
        return self.options.get(group, {}).get(key, default)

    def exposed(self):
        """Yield (method, operation) pairs for methods not suppressed."""
        for method, op in zip(self.methods, self.operations):
            if not op.is_suppressed:
                yield method, op

    def documented(self):
        """Yield (method, operation) pairs that belong in schema documents."""
        for method, op in zip(self.methods, self.operations):
            if op.in_schema:
                yield method, op
