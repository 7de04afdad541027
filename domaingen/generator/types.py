"""Type definitions for declaration parsing."""

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import Any

from dataclasses_json import DataClassJsonMixin


class DeclarationKind(StrEnum):
    """Kinds of top-level declarations."""

    RECORD = auto()
    SUM = auto()
    ALIAS = auto()


class Visibility(StrEnum):
    """Visibility of a record field."""

    PUBLIC = auto()
    PRIVATE = auto()


@dataclass(frozen=True)
class SourceLocation(DataClassJsonMixin):
    """Position of a declaration element in its source file."""

    line: int
    column: int
    file: str | None = None

    def __str__(self) -> str:
        return f"{self.file or '<input>'}:{self.line}:{self.column}"


@dataclass
class TypeRef(DataClassJsonMixin):
    """Represents a reference to a type.

    The name may be dotted (``uuid.UUID``); generic arguments are kept
    as nested references (``list[string]``).
    """

    name: str
    args: list["TypeRef"] = field(default_factory=list)

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(str(arg) for arg in self.args)}]"


@dataclass
class DirectiveArg(DataClassJsonMixin):
    """Represents an argument to a directive."""

    name: str | None
    value: Any


@dataclass
class Directive(DataClassJsonMixin):
    """Represents a generator directive attached to a declaration."""

    name: str
    arguments: list[DirectiveArg]
    location: SourceLocation | None = None


@dataclass
class FieldDecl(DataClassJsonMixin):
    """Represents a field of a record."""

    name: str
    type: TypeRef
    visibility: Visibility
    docs: list[str]
    location: SourceLocation | None = None


@dataclass
class VariantDecl(DataClassJsonMixin):
    """Represents a variant of a sum, wrapping exactly one payload."""

    name: str
    payload: TypeRef
    docs: list[str]
    location: SourceLocation | None = None


@dataclass
class Declaration(DataClassJsonMixin):
    """Represents a record, sum or alias declaration.

    Only the members matching ``kind`` are populated: ``fields`` for
    records, ``variants`` for sums and ``target`` for aliases.
    """

    kind: DeclarationKind
    name: str
    directives: list[Directive]
    docs: list[str]
    fields: list[FieldDecl] = field(default_factory=list)
    variants: list[VariantDecl] = field(default_factory=list)
    target: TypeRef | None = None
    location: SourceLocation | None = None

