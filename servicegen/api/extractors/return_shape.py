"""Return-shape analysis: declared return type -> one of six ReturnShapes."""

from dataclasses import replace

from servicegen.lib.descriptors import ReturnShape
from servicegen.lib.type_refs import (
    LAZY_SEQUENCE_NAMES,
    OPTIONAL_NAMES,
    OUTCOME_NAMES,
    SEQUENCE_NAMES,
    TypeRef,
)

DEFAULT_FAILURE_TYPE = TypeRef("Error")


def analyze_return_type(type_ref):
    """
    Classify a declared return type by structural matching.

    Precedence: outcome sum -> optional -> sequence -> lazy sequence -> unit
    -> plain value.
    """
    if type_ref is None:
        return ReturnShape.unit()

    if type_ref.is_named(OUTCOME_NAMES) and type_ref.args:
        failure = type_ref.args[1] if len(type_ref.args) > 1 else DEFAULT_FAILURE_TYPE
        return ReturnShape.outcome(type_ref.args[0], failure)

    if type_ref.is_named(OPTIONAL_NAMES) and len(type_ref.args) == 1:
        return ReturnShape.optional(type_ref.args[0])

    if type_ref.is_named(SEQUENCE_NAMES) and type_ref.args:
        return ReturnShape.sequence(type_ref.args[0])

    # Generator[Yield, Send, Return] streams its first argument
    if type_ref.is_named(LAZY_SEQUENCE_NAMES) and type_ref.args:
        return ReturnShape.lazy_sequence(type_ref.args[0])

    if type_ref.is_unit:
        return ReturnShape.unit()

    return ReturnShape.plain(type_ref)


def analyze_methods(methods):
    """Return new MethodDescriptors with return_shape filled in."""
    return [replace(m, return_shape=analyze_return_type(m.return_type)) for m in methods]
