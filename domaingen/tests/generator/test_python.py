"""Tests for Python code generation."""

import pytest

from domaingen.generator import parse, python
from domaingen.generator.diagnostics import DirectiveError, ErrorCategory
from domaingen.generator.types import TypeRef

USERS = """
#: A registered user.
@entity(events=UserEvents)
record User {
    #: Primary key.
    id: Uuid
    version: uint64
    name: string
}

@domain_event
record UserCreated {
    id: Uuid
    aggregate_id: Uuid
    occurred: uint64
    version: uint64
}

@domain_event
record UserRenamed {
    id: Uuid
    aggregate_id: Uuid
    occurred: uint64
    version: uint64
    pub name: string
}

@domain_events
sum UserEvents {
    #: The user signed up.
    Created(UserCreated)
    Renamed(UserRenamed)
}

@value_object
record Email {
    value: string
}

@command
record RenameUser {
    pub id: Uuid
    pub name: string
}

alias UserId = Uuid
"""


def _render(text, **kwargs):
    return python.render(parse(text), **kwargs)


def describe_map_type():
    def maps_primitives(expect):
        expect(python.map_type(TypeRef(name="uint64"))) == "int"
        expect(python.map_type(TypeRef(name="float32"))) == "float"
        expect(python.map_type(TypeRef(name="string"))) == "str"
        expect(python.map_type(TypeRef(name="Uuid"))) == "UUID"

    def maps_generic_arguments(expect):
        t = TypeRef(name="dict", args=[TypeRef(name="string"), TypeRef(name="int8")])
        expect(python.map_type(t)) == "dict[str, int]"

    def keeps_declared_names(expect):
        expect(python.map_type(TypeRef(name="UserCreated"))) == "UserCreated"


def describe_render():
    def renders_one_class_per_record_and_sum(expect):
        source = _render(USERS)
        for name in ("User", "UserCreated", "UserRenamed", "UserEvents", "Email", "RenameUser"):
            expect(f"\nclass {name}(" in source) == True

    def picks_bases_from_directives(expect):
        source = _render(USERS)
        expect("class User(AggregateRoot):" in source) == True
        expect("class UserCreated(DomainEvent):" in source) == True
        expect("class UserEvents(DomainEvents):" in source) == True
        expect("class Email(ValueObject):" in source) == True
        expect("class RenameUser(Command):" in source) == True

    def uses_entity_base_without_events(expect):
        source = _render("@entity\nrecord Account { id: Uuid  version: uint32 }")
        expect("class Account(Entity):" in source) == True
        expect(".events =" in source) == False

    def assigns_events_after_every_class(expect):
        source = _render(USERS)
        expect(source.rstrip().endswith("User.events = UserEvents")) == True

    def repeats_field_docs_on_accessors(expect):
        source = _render(USERS)
        expect('    def id(self) -> UUID:\n        """Primary key."""\n' in source) == True

    def emits_declaration_docs(expect):
        source = _render(USERS)
        expect('class User(AggregateRoot):\n    """A registered user."""\n' in source) == True

    def escapes_docstring_quotes(expect):
        source = _render('#: Say """hi"""\nrecord R {}')
        expect('\\"\\"\\"hi' in source) == True

    def emits_one_dispatch_arm_per_variant(expect):
        source = _render(USERS)
        expect(source.count("case UserEvents.Created(payload):")) == 4
        expect(source.count("case UserEvents.Renamed(payload):")) == 4
        expect(source.count("match self:")) == 4

    def dispatches_empty_sums_to_an_error(expect):
        source = _render("@domain_events\nsum Nothing {}")
        expect(source.count('raise TypeError("Nothing has no variants")')) == 4

    def generates_a_validation_error_per_value_object(expect):
        source = _render(USERS)
        expect("class EmailValidationError(ValueValidationError):" in source) == True
        expect("raise EmailValidationError(value)" in source) == True

    def only_exposes_public_fields_of_plain_records(expect):
        source = _render("record Point { pub x: int32  y: int32 }")
        expect("def x(self) -> int:" in source) == True
        expect("@x.setter" in source) == True
        expect("def y(self)" in source) == False

    def renders_aliases(expect):
        source = _render(USERS)
        expect('UserId: TypeAlias = "UUID"' in source) == True

    def imports_a_sibling_runtime_by_default(expect):
        source = _render(USERS)
        expect("sys.path.insert(0, _runtime_path)" in source) == True
        expect("    from domaingen_runtime import (" in source) == True

    def imports_a_package_runtime_directly(expect):
        source = _render(USERS, runtime_import="domaingen.runtime")
        expect("\nfrom domaingen.runtime import (" in source) == True
        expect("sys.path" in source) == False

    def compiles(expect):
        source = _render(USERS)
        expect(compile(source, "<generated>", "exec")) != None


def describe_render_errors():
    def raises_before_rendering_anything(expect):
        with pytest.raises(DirectiveError) as excinfo:
            _render(USERS + "\n@entity\nrecord Broken { name: string }")
        expect(excinfo.value.declaration) == "Broken"

    def rejects_conflicting_directives(expect):
        with pytest.raises(DirectiveError) as excinfo:
            _render(
                """
                @entity
                @domain_event
                record Both {
                    id: Uuid
                    aggregate_id: Uuid
                    occurred: uint64
                    version: uint64
                }
            """
            )
        expect(excinfo.value.category) == ErrorCategory.DIRECTIVE
        expect(excinfo.value.directive) == "domain_event"
        expect("already synthesized" in str(excinfo.value)) == True

    def rejects_directives_on_aliases(expect):
        with pytest.raises(DirectiveError) as excinfo:
            _render("@command\nalias Id = Uuid")
        expect(excinfo.value.category) == ErrorCategory.SHAPE

    def rejects_variants_named_after_dispatchers(expect):
        with pytest.raises(DirectiveError) as excinfo:
            _render("@domain_events\nsum S { id(E)  Other(E) }")
        expect(excinfo.value.category) == ErrorCategory.DIRECTIVE
        expect(excinfo.value.directive) == "domain_events"
        expect("`id` collides with a generated member" in str(excinfo.value)) == True

    def rejects_variants_named_after_sum_members(expect):
        for name in ("payload", "variants"):
            with pytest.raises(DirectiveError) as excinfo:
                _render(f"sum S {{ {name}(E) }}")
            expect(excinfo.value.category) == ErrorCategory.DIRECTIVE
            expect(f"`{name}` collides" in str(excinfo.value)) == True

    def rejects_an_events_field_on_aggregates(expect):
        with pytest.raises(DirectiveError) as excinfo:
            _render(
                """
                @entity(events=UserEvents)
                record User { id: Uuid  version: uint64  events: string }
            """
            )
        expect(excinfo.value.directive) == "entity"
        expect("`events` collides" in str(excinfo.value)) == True

    def allows_an_events_field_without_events_argument(expect):
        source = _render("@entity\nrecord User { id: Uuid  version: uint64  events: string }")
        expect("def events(self) -> str:" in source) == True


def describe_runtime():
    def returns_runtime_files(expect):
        files = python.runtime()
        expect(sorted(files)) == ["__init__.py", "contracts.py"]
        expect("class ValueObject" in files["contracts.py"]) == True
