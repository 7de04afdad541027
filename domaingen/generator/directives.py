"""Generator directives understood by domaingen."""

from enum import StrEnum

from .diagnostics import ErrorCategory, Violation
from .types import Directive


class DirectiveKind(StrEnum):
    """Generator selected by a directive name."""

    ENTITY = "entity"
    VALUE_OBJECT = "value_object"
    DOMAIN_EVENT = "domain_event"
    DOMAIN_EVENTS = "domain_events"
    COMMAND = "command"
    QUERY = "query"


# Named arguments accepted per directive; values must be identifiers
DIRECTIVE_ARGUMENTS: dict[DirectiveKind, frozenset[str]] = {
    DirectiveKind.ENTITY: frozenset(["events"]),
}


def lookup(name: str) -> DirectiveKind | None:
    """Return the directive kind called ``name``, or None."""
    try:
        return DirectiveKind(name)
    except ValueError:
        return None


def check_arguments(kind: DirectiveKind, directive: Directive) -> Violation | None:
    """Check that a directive only carries arguments its generator reads."""
    accepted = DIRECTIVE_ARGUMENTS.get(kind, frozenset())

    for arg in directive.arguments:
        if arg.name is None:
            return Violation(ErrorCategory.DIRECTIVE, "positional arguments are not supported")
        if arg.name not in accepted:
            return Violation(ErrorCategory.DIRECTIVE, f"unexpected argument `{arg.name}`")
        if not isinstance(arg.value, str) or not arg.value.isidentifier():
            return Violation(
                ErrorCategory.DIRECTIVE, f"argument `{arg.name}` must name a declaration"
            )

    return None


def argument(directive: Directive, name: str) -> str | None:
    """Return the value of a named directive argument."""
    return next((arg.value for arg in directive.arguments if arg.name == name), None)
