"""Diagnostics raised while generating code from declarations."""

from dataclasses import dataclass
from enum import StrEnum, auto

from .types import Declaration, Directive, SourceLocation


class ErrorCategory(StrEnum):
    """Which stage rejected the input."""

    SYNTAX = auto()  # The parser could not read the file
    DECLARATION = auto()  # A file-level rule such as unique names is broken
    SHAPE = auto()  # The declaration is neither a record nor a sum
    PRECONDITION = auto()  # A required field or structure is missing
    DIRECTIVE = auto()  # Unknown, misused or conflicting directive


@dataclass(frozen=True)
class Violation:
    """A failed check, before it is tied to a source location."""

    category: ErrorCategory
    message: str
    field: str | None = None


class DomainGenError(RuntimeError):
    """Base class for errors that halt code generation."""

    category = ErrorCategory.DIRECTIVE

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.location}: {self.message}"


class DeclarationSyntaxError(DomainGenError):
    """Raised when a declaration file cannot be parsed."""

    category = ErrorCategory.SYNTAX


class DirectiveError(DomainGenError):
    """Raised when a directive cannot be applied to its declaration."""

    def __init__(
        self,
        violation: Violation,
        declaration: str,
        directive: str | None,
        location: SourceLocation | None = None,
    ) -> None:
        prefix = f"@{directive} on {declaration}" if directive else declaration
        super().__init__(f"{prefix}: {violation.message}", location)
        self.violation = violation
        self.declaration = declaration
        self.directive = directive
        self.category = violation.category


def report(
    declaration: Declaration, directive: Directive | None, violation: Violation
) -> DirectiveError:
    """Wrap a violation into an error anchored at the declaration."""
    return DirectiveError(
        violation,
        declaration.name,
        directive.name if directive else None,
        declaration.location,
    )
