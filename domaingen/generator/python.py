"""Python code generator for domain model declarations."""

import logging
import textwrap
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from importlib import resources

from jinja2 import Environment, PackageLoader

from .descriptor import DescriptorKind, TypeDescriptor
from .diagnostics import ErrorCategory, Violation, report
from .directives import DirectiveKind, argument
from .pipeline import CheckedDirective, check
from .shape import extract
from .types import Declaration, DeclarationKind, Directive, TypeRef

logger = logging.getLogger(__name__)

RUNTIME_FILES = [
    "__init__.py",
    "contracts.py",
]

RUNTIME_NAMES = [
    "AggregateRoot",
    "Command",
    "DomainEvent",
    "DomainEvents",
    "Entity",
    "Query",
    "ValueObject",
    "ValueValidationError",
]

env = Environment(
    loader=PackageLoader("domaingen.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")
macros = env.get_template("members.py.j2").module

# Map declared types to Python type annotations
PRIMITIVE_TYPE_MAP = {
    "bool": "bool",
    "int8": "int",
    "int16": "int",
    "int32": "int",
    "int64": "int",
    "int128": "int",
    "uint8": "int",
    "uint16": "int",
    "uint32": "int",
    "uint64": "int",
    "uint128": "int",
    "float32": "float",
    "float64": "float",
    "bytes": "bytes",
    "string": "str",
    "Uuid": "UUID",
    "uuid": "UUID",
}

# Appended to a value object's name to form its validation error
ERROR_SUFFIX = "ValidationError"

# Accessors of the event metadata contract and their return annotations
EVENT_ACCESSORS = {
    "occurred": "int",
    "id": "UUID",
    "aggregate_id": "UUID",
    "version": "int",
}

# Members every sum class defines besides its variants
SUM_MEMBERS = frozenset(["payload", "variants"])


def map_type(t: TypeRef) -> str:
    """Map a declared type to a Python type annotation."""
    type_name = PRIMITIVE_TYPE_MAP.get(t.name, t.name)

    if t.args:
        return f"{type_name}[{', '.join(map_type(arg) for arg in t.args)}]"
    return type_name


def error_name(type_name: str) -> str:
    """Name of the error generated for a value object."""
    return f"{type_name}{ERROR_SUFFIX}"


def _docstring(lines: Sequence[str]) -> str:
    """Render doc comment lines as a docstring, unindented."""
    if not lines:
        return ""
    escaped = [line.replace("\\", "\\\\").replace('"""', '\\"\\"\\"') for line in lines]
    if len(escaped) == 1 and not escaped[0].endswith('"'):
        return f'"""{escaped[0]}"""'
    return '"""' + "\n".join(escaped) + '\n"""'


def _body_doc(lines: Sequence[str]) -> str:
    """Docstring indented for a function body."""
    return textwrap.indent(_docstring(lines), "    ")


def _member(source: str) -> str:
    return textwrap.dedent(str(source)).strip("\n")


@dataclass
class Fragment:
    """Source one directive contributes to its declaration."""

    kind: DirectiveKind
    directive: Directive
    bases: list[str] = field(default_factory=list)
    members: dict[str, str] = field(default_factory=dict)
    # Member names supplied outside the generator; no layout accessor is emitted
    reserved: frozenset[str] = frozenset()
    preamble: list[str] = field(default_factory=list)
    epilogue: list[str] = field(default_factory=list)
    payload_contract: str | None = None
    # Names assigned on the class once every class exists
    class_attributes: frozenset[str] = frozenset()


def _synthesize_entity(checked: CheckedDirective) -> Fragment:
    d = checked.descriptor
    events = argument(checked.directive, "events")
    id_field = d.field("id")
    version_field = d.field("version")

    members = {
        "id": macros.readonly_property(
            "id", map_type(id_field.type_ref), "self._id", _body_doc(id_field.doc_lines)
        ),
        "version": macros.readonly_property(
            "version", "int", "int(self._version)", _body_doc(version_field.doc_lines)
        ),
        "__eq__": macros.eq_by(d.name, "_id"),
        "__hash__": macros.hash_by("_id"),
    }

    # id and version already have accessors from the contract
    for f in d.fields:
        if f.name in ("id", "version"):
            continue
        members[f.name] = macros.readonly_property(
            f.name, map_type(f.type_ref), f"self._{f.name}", _body_doc(f.doc_lines)
        )

    return Fragment(
        kind=checked.kind,
        directive=checked.directive,
        bases=["AggregateRoot" if events else "Entity"],
        members=members,
        epilogue=[f"{d.name}.events = {events}"] if events else [],
        class_attributes=frozenset(["events"]) if events else frozenset(),
    )


def _synthesize_value_object(checked: CheckedDirective) -> Fragment:
    d = checked.descriptor
    value = d.fields[0]
    error = error_name(d.name)

    return Fragment(
        kind=checked.kind,
        directive=checked.directive,
        bases=["ValueObject"],
        members={
            "__str__": macros.str_of("_value"),
            "__eq__": macros.eq_by(d.name, "_value"),
            "__hash__": macros.hash_by("_value"),
            "clone": macros.clone(d.name, value.name),
            "try_from": macros.try_from(d.name, value.name, map_type(value.type_ref), error),
        },
        # validate() and the value accessor come from ValueObject and the user
        reserved=frozenset(["value", "validate"]),
        preamble=[macros.validation_error(d.name, error)],
    )


def _synthesize_domain_event(checked: CheckedDirective) -> Fragment:
    d = checked.descriptor
    members: dict[str, str] = {}

    for name in EVENT_ACCESSORS:
        f = d.field(name)
        if name == "version":
            annotation, expr = "int", "int(self._version)"
        else:
            annotation, expr = map_type(f.type_ref), f"self._{name}"
        members[name] = macros.readonly_property(name, annotation, expr, _body_doc(f.doc_lines))

    return Fragment(
        kind=checked.kind,
        directive=checked.directive,
        bases=["DomainEvent"],
        members=members,
    )


def _synthesize_domain_events(checked: CheckedDirective) -> Fragment:
    d = checked.descriptor

    return Fragment(
        kind=checked.kind,
        directive=checked.directive,
        bases=["DomainEvents"],
        members={
            name: macros.dispatch(d.name, d.variants, name, annotation)
            for name, annotation in EVENT_ACCESSORS.items()
        },
        payload_contract="DomainEvent",
    )


def _marker(base: str) -> Callable[[CheckedDirective], Fragment]:
    def synthesize(checked: CheckedDirective) -> Fragment:
        return Fragment(kind=checked.kind, directive=checked.directive, bases=[base])

    return synthesize


SYNTHESIZERS: dict[DirectiveKind, Callable[[CheckedDirective], Fragment]] = {
    DirectiveKind.ENTITY: _synthesize_entity,
    DirectiveKind.VALUE_OBJECT: _synthesize_value_object,
    DirectiveKind.DOMAIN_EVENT: _synthesize_domain_event,
    DirectiveKind.DOMAIN_EVENTS: _synthesize_domain_events,
    DirectiveKind.COMMAND: _marker("Command"),
    DirectiveKind.QUERY: _marker("Query"),
}


def synthesize(checked: CheckedDirective) -> Fragment:
    """Produce the source fragment for a checked directive."""
    return SYNTHESIZERS[checked.kind](checked)


@dataclass
class _Variant:
    class_name: str
    name: str
    annotation: str
    doc: str


@dataclass
class _ClassPlan:
    name: str
    bases: list[str]
    doc: str
    members: list[str]
    variants: list[_Variant]
    preamble: list[str]
    epilogue: list[str]


def _slots(names: Sequence[str]) -> str:
    quoted = ", ".join(f'"{name}"' for name in names)
    if len(names) == 1:
        quoted += ","
    return f"__slots__ = ({quoted})"


def _gen_init(d: TypeDescriptor) -> str:
    """Generate a keyword-only constructor storing every field privately."""
    if not d.fields:
        return "def __init__(self) -> None:\n    pass"
    params = ", ".join(f"{f.name}: {map_type(f.type_ref)}" for f in d.fields)
    lines = [f"def __init__(self, *, {params}) -> None:"]
    lines.extend(f"    self._{f.name} = {f.name}" for f in d.fields)
    return "\n".join(lines)


def _gen_repr(d: TypeDescriptor) -> str:
    parts = ", ".join(f"{f.name}={{self._{f.name}!r}}" for f in d.fields)
    return f'def __repr__(self) -> str:\n    return f"{d.name}({parts})"'


def _payload_union(d: TypeDescriptor) -> str:
    return " | ".join(map_type(v.payload_type_ref) for v in d.variants) or "object"


def _gen_sum_init(d: TypeDescriptor, payload_contract: str | None) -> str:
    union = _payload_union(d)
    lines = [
        f"def __init__(self, payload: {union}) -> None:",
        f"    if type(self) is {d.name}:",
        f'        raise TypeError("{d.name} must be constructed through one of its variants")',
    ]
    if payload_contract:
        lines += [
            f"    if not isinstance(payload, {payload_contract}):",
            "        raise TypeError(",
            f'            f"{{type(self).__qualname__}} payload must be a {payload_contract}, "',
            '            f"got {type(payload).__name__}"',
            "        )",
        ]
    lines.append("    self._payload = payload")
    return "\n".join(lines)


def _record_layout(d: TypeDescriptor, claimed: set[str]) -> list[str]:
    members = [_slots([f"_{f.name}" for f in d.fields]), _gen_init(d), _gen_repr(d)]

    for f in d.fields:
        if f.is_public and f.name not in claimed:
            members.append(
                _member(
                    macros.property_with_setter(f.name, map_type(f.type_ref), _body_doc(f.doc_lines))
                )
            )

    return members


def _sum_layout(d: TypeDescriptor, payload_contract: str | None) -> list[str]:
    variant_names = ", ".join(f'"{v.name}"' for v in d.variants)
    if len(d.variants) == 1:
        variant_names += ","
    header = [
        _slots(["_payload"]),
        '__match_args__ = ("payload",)',
        f"variants: ClassVar[tuple[str, ...]] = ({variant_names})",
    ]
    header.extend(f"{v.name}: ClassVar[type[{d.name}]]" for v in d.variants)

    return [
        "\n".join(header),
        _gen_sum_init(d, payload_contract),
        f"@property\ndef payload(self) -> {_payload_union(d)}:\n"
        "    return self._payload",
        'def __repr__(self) -> str:\n    return f"{type(self).__qualname__}({self._payload!r})"',
        "def __eq__(self, other: object) -> bool:\n"
        "    if type(other) is not type(self):\n"
        "        return NotImplemented\n"
        "    return self._payload == other._payload",
        "def __hash__(self) -> int:\n    return hash((type(self).__qualname__, self._payload))",
    ]


def _plan_class(declaration: Declaration) -> _ClassPlan:
    layout = extract(declaration)
    if isinstance(layout, Violation):
        raise report(declaration, None, layout)

    fragments = [synthesize(checked) for checked in check(declaration)]

    bases: list[str] = []
    members: dict[str, str] = {}
    owners: dict[str, Directive] = {}
    reserved: set[str] = set()
    payload_contract: str | None = None

    for fragment in fragments:
        for base in fragment.bases:
            if base not in bases:
                bases.append(base)
        for name, source in fragment.members.items():
            if name in members:
                raise report(
                    declaration,
                    fragment.directive,
                    Violation(
                        ErrorCategory.DIRECTIVE,
                        f"`{name}` is already synthesized by another directive",
                    ),
                )
            members[name] = _member(source)
            owners[name] = fragment.directive
        reserved |= fragment.reserved
        payload_contract = payload_contract or fragment.payload_contract

    # Names bound on the class after its body must not replace a member
    assigned: list[tuple[str, Directive | None]] = [
        (name, fragment.directive) for fragment in fragments for name in fragment.class_attributes
    ]
    taken = set(members)
    if layout.kind == DescriptorKind.SUM:
        assigned += [(v.name, None) for v in layout.variants]
        taken |= SUM_MEMBERS
    else:
        taken |= {f.name for f in layout.fields if f.is_public}
    for name, directive in assigned:
        if name in taken:
            raise report(
                declaration,
                owners.get(name, directive),
                Violation(ErrorCategory.DIRECTIVE, f"`{name}` collides with a generated member"),
            )

    if layout.kind == DescriptorKind.RECORD:
        body = _record_layout(layout, set(members) | reserved)
        variants: list[_Variant] = []
    else:
        body = _sum_layout(layout, payload_contract)
        variants = [
            _Variant(
                class_name=f"_{layout.name}{v.name}",
                name=v.name,
                annotation=map_type(v.payload_type_ref),
                doc=_docstring(v.doc_lines),
            )
            for v in layout.variants
        ]

    logger.debug(
        "%s: %d members from %s",
        declaration.name,
        len(members),
        ", ".join(f"@{f.kind}" for f in fragments) or "layout only",
    )

    return _ClassPlan(
        name=declaration.name,
        bases=bases,
        doc=_docstring(layout.doc_lines),
        members=body + list(members.values()),
        variants=variants,
        preamble=[_member(block) for fragment in fragments for block in fragment.preamble],
        epilogue=[line for fragment in fragments for line in fragment.epilogue],
    )


def render(
    declarations: list[Declaration],
    runtime_import: str = "domaingen_runtime",
) -> str:
    """Render declarations to a Python module.

    Raises:
        DirectiveError: a directive failed; nothing is rendered.
    """
    classes: list[_ClassPlan] = []
    aliases: list[str] = []

    for declaration in declarations:
        if declaration.kind == DeclarationKind.ALIAS:
            # Aliases have no shape; any directive on one is a shape error
            check(declaration)
            aliases.append(f'{declaration.name}: TypeAlias = "{map_type(declaration.target)}"')
            continue
        classes.append(_plan_class(declaration))

    return template.render(
        classes=classes,
        aliases=aliases,
        preamble=[block for cls in classes for block in cls.preamble],
        epilogue=[line for cls in classes for line in cls.epilogue],
        runtime_import=runtime_import,
        runtime_names=RUNTIME_NAMES,
        local_runtime="." not in runtime_import,
    )


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("domaingen.runtime").joinpath(filename).read_text()
        result[filename] = content
    return result
