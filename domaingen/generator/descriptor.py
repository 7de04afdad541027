"""Normalized descriptions of declaration shapes.

A TypeDescriptor is built from a Declaration each time a directive is
processed, read by the precondition validator and the synthesizer, and
then dropped. Descriptors are frozen so neither stage can alter what the
other sees.
"""

from dataclasses import dataclass
from enum import StrEnum, auto

from dataclasses_json import DataClassJsonMixin

from .classifier import TypeClass
from .types import SourceLocation, TypeRef, Visibility


class DescriptorKind(StrEnum):
    """Structural kind of a described declaration."""

    RECORD = auto()
    SUM = auto()


@dataclass(frozen=True)
class FieldDescriptor(DataClassJsonMixin):
    """Describes one record field."""

    name: str
    type_name: str
    classification: TypeClass
    visibility: Visibility
    doc_lines: tuple[str, ...]
    type_ref: TypeRef

    @property
    def is_public(self) -> bool:
        return self.visibility == Visibility.PUBLIC


@dataclass(frozen=True)
class VariantDescriptor(DataClassJsonMixin):
    """Describes one sum variant and its payload."""

    name: str
    payload_type_name: str
    doc_lines: tuple[str, ...]
    payload_type_ref: TypeRef


@dataclass(frozen=True)
class TypeDescriptor(DataClassJsonMixin):
    """Describes a record or a sum."""

    kind: DescriptorKind
    name: str
    fields: tuple[FieldDescriptor, ...] = ()
    variants: tuple[VariantDescriptor, ...] = ()
    doc_lines: tuple[str, ...] = ()
    location: SourceLocation | None = None

    def field(self, name: str) -> FieldDescriptor | None:
        """Return the field called ``name``, if any."""
        return next((f for f in self.fields if f.name == name), None)
