"""Directive processing: extract, validate, and hand off to synthesis."""

import logging
from dataclasses import dataclass

from .descriptor import TypeDescriptor
from .diagnostics import DirectiveError, ErrorCategory, Violation, report
from .directives import DirectiveKind, check_arguments, lookup
from .preconditions import validate
from .shape import extract
from .types import Declaration, Directive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckedDirective:
    """A directive whose preconditions hold, ready for synthesis."""

    kind: DirectiveKind
    directive: Directive
    descriptor: TypeDescriptor


def check_directive(declaration: Declaration, directive: Directive) -> CheckedDirective:
    """Run one directive up to synthesis.

    Raises:
        DirectiveError: the directive is unknown or misused, the declaration
            has no describable shape, or a precondition does not hold.
    """
    kind = lookup(directive.name)
    if kind is None:
        raise report(
            declaration,
            directive,
            Violation(ErrorCategory.DIRECTIVE, f"unknown directive `@{directive.name}`"),
        )

    violation = check_arguments(kind, directive)
    if violation is not None:
        raise report(declaration, directive, violation)

    # A fresh descriptor for every directive; nothing is shared between runs
    descriptor = extract(declaration)
    if isinstance(descriptor, Violation):
        raise report(declaration, directive, descriptor)

    violation = validate(kind, descriptor)
    if violation is not None:
        logger.debug("@%s rejected %s: %s", kind, declaration.name, violation.message)
        raise report(declaration, directive, violation)

    logger.debug("@%s accepted %s", kind, declaration.name)
    return CheckedDirective(kind=kind, directive=directive, descriptor=descriptor)


def check(declaration: Declaration) -> list[CheckedDirective]:
    """Run every directive attached to a declaration, in order."""
    seen: set[str] = set()
    checked: list[CheckedDirective] = []

    for directive in declaration.directives:
        if directive.name in seen:
            raise report(
                declaration,
                directive,
                Violation(ErrorCategory.DIRECTIVE, "directive applied more than once"),
            )
        seen.add(directive.name)
        checked.append(check_directive(declaration, directive))

    return checked


def check_all(declarations: list[Declaration]) -> list[DirectiveError]:
    """Check every declaration independently and collect the failures.

    Each directive still stops at its first violation; this only keeps
    going to the next declaration so a whole file can be reported at once.
    """
    errors: list[DirectiveError] = []
    for declaration in declarations:
        try:
            check(declaration)
        except DirectiveError as err:
            errors.append(err)
    return errors
