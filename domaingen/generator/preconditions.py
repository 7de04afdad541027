"""Structural preconditions checked before code is synthesized.

Each directive kind owns an ordered tuple of predicates. A predicate
returns a Violation describing what is missing, or None when it holds.
Validation stops at the first violation; errors are never accumulated.
"""

from collections.abc import Callable

from .classifier import TypeClass
from .descriptor import DescriptorKind, FieldDescriptor, TypeDescriptor
from .diagnostics import ErrorCategory, Violation
from .directives import DirectiveKind

Predicate = Callable[[TypeDescriptor], Violation | None]


def is_record(descriptor: TypeDescriptor) -> Violation | None:
    if descriptor.kind != DescriptorKind.RECORD:
        return Violation(ErrorCategory.PRECONDITION, "expected data structure to be a record")
    return None


def is_sum(descriptor: TypeDescriptor) -> Violation | None:
    if descriptor.kind != DescriptorKind.SUM:
        return Violation(ErrorCategory.PRECONDITION, "expected data structure to be a sum")
    return None


def has_field(
    name: str, accepts: Callable[[TypeClass], bool], expectation: str
) -> Predicate:
    """Require a field called ``name`` whose classification ``accepts`` allows."""

    def predicate(descriptor: TypeDescriptor) -> Violation | None:
        f = descriptor.field(name)
        if f is None or not accepts(f.classification):
            return Violation(
                ErrorCategory.PRECONDITION,
                f"expected `{name}` field with {expectation}",
                field=name,
            )
        return None

    predicate.__name__ = f"has_{name}_field"
    return predicate


def _is_identifier(tc: TypeClass) -> bool:
    return tc == TypeClass.IDENTIFIER


def _is_integer(tc: TypeClass) -> bool:
    return tc.is_integer


def _is_timestamp(tc: TypeClass) -> bool:
    return tc == TypeClass.TIMESTAMP


def no_public_fields(descriptor: TypeDescriptor) -> Violation | None:
    public: list[FieldDescriptor] = [f for f in descriptor.fields if f.is_public]
    if public:
        return Violation(
            ErrorCategory.PRECONDITION,
            f"cannot have any public fields, found `{public[0].name}`; "
            "state may only change through methods",
            field=public[0].name,
        )
    return None


def single_value_field(descriptor: TypeDescriptor) -> Violation | None:
    if len(descriptor.fields) != 1 or descriptor.fields[0].name != "value":
        return Violation(
            ErrorCategory.PRECONDITION,
            "expected a record with a single field named `value`",
            field="value",
        )
    return None


has_id = has_field("id", _is_identifier, "a uuid type")
has_aggregate_id = has_field("aggregate_id", _is_identifier, "a uuid type")
has_occurred = has_field("occurred", _is_timestamp, "type uint64")
has_version = has_field("version", _is_integer, "an integer type")


PRECONDITIONS: dict[DirectiveKind, tuple[Predicate, ...]] = {
    DirectiveKind.ENTITY: (is_record, has_id, has_version, no_public_fields),
    DirectiveKind.VALUE_OBJECT: (is_record, single_value_field),
    DirectiveKind.DOMAIN_EVENT: (is_record, has_id, has_aggregate_id, has_occurred, has_version),
    DirectiveKind.DOMAIN_EVENTS: (is_sum,),
    DirectiveKind.COMMAND: (),
    DirectiveKind.QUERY: (),
}


def validate(kind: DirectiveKind, descriptor: TypeDescriptor) -> Violation | None:
    """Return the first failed precondition of ``kind``, or None."""
    for predicate in PRECONDITIONS[kind]:
        violation = predicate(descriptor)
        if violation is not None:
            return violation
    return None
