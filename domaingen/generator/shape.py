"""Extraction of type descriptors from parsed declarations."""

from .classifier import classify
from .descriptor import DescriptorKind, FieldDescriptor, TypeDescriptor, VariantDescriptor
from .diagnostics import ErrorCategory, Violation
from .types import Declaration, DeclarationKind


def extract(declaration: Declaration) -> TypeDescriptor | Violation:
    """Build a descriptor for a record or sum declaration.

    Fields and variants keep declaration order, and field doc comments
    are carried verbatim so generated accessors can repeat them. Any
    other declaration kind (an alias, say) cannot be described and yields
    a shape violation instead.
    """
    if declaration.kind == DeclarationKind.RECORD:
        return TypeDescriptor(
            kind=DescriptorKind.RECORD,
            name=declaration.name,
            fields=tuple(
                FieldDescriptor(
                    name=f.name,
                    type_name=str(f.type),
                    # Generic arguments do not affect classification
                    classification=classify(f.type.name),
                    visibility=f.visibility,
                    doc_lines=tuple(f.docs),
                    type_ref=f.type,
                )
                for f in declaration.fields
            ),
            doc_lines=tuple(declaration.docs),
            location=declaration.location,
        )

    if declaration.kind == DeclarationKind.SUM:
        return TypeDescriptor(
            kind=DescriptorKind.SUM,
            name=declaration.name,
            variants=tuple(
                VariantDescriptor(
                    name=v.name,
                    payload_type_name=str(v.payload),
                    doc_lines=tuple(v.docs),
                    payload_type_ref=v.payload,
                )
                for v in declaration.variants
            ),
            doc_lines=tuple(declaration.docs),
            location=declaration.location,
        )

    return Violation(
        ErrorCategory.SHAPE,
        f"cannot describe {declaration.kind} {declaration.name}; expected a record or sum",
    )
