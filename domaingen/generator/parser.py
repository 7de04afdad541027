"""Declaration file parser using Lark."""

import keyword
import os
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark, Token, UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken
from lark.visitors import Transformer

from .diagnostics import DeclarationSyntaxError, DomainGenError, ErrorCategory
from .types import (
    Declaration,
    DeclarationKind,
    Directive,
    DirectiveArg,
    FieldDecl,
    SourceLocation,
    TypeRef,
    VariantDecl,
    Visibility,
)

_g_parser: Lark | None = None

# Parameter names of generated methods; a field with one of these names
# would clash with them
RESERVED_FIELD_NAMES = frozenset(["self", "cls"])


class ValidationError(DomainGenError):
    """Raised when a declaration file breaks a file-level rule."""

    category = ErrorCategory.DECLARATION


@dataclass
class _Doc:
    value: str


@dataclass
class _Name:
    value: str
    line: int
    column: int


@dataclass
class _DottedName:
    value: str


@dataclass
class _TypeArgs:
    args: list[TypeRef]


@dataclass
class _Body:
    kind: DeclarationKind
    name: _Name
    fields: list[FieldDecl]
    variants: list[VariantDecl]
    target: TypeRef | None


TFilter = TypeVar("TFilter", bound=object)


def _filter(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


def _find_one(args: list[Any], class_type: type[object]) -> Any:
    filtered = _filter(args, class_type)
    if len(filtered) == 0:
        return None
    if len(filtered) > 1:
        raise RuntimeError(f"Found more than one {class_type}")
    return filtered[0]


TMany = TypeVar("TMany")


def _find_many(args: list[Any], class_type: type[TMany]) -> list[TMany]:
    return _filter(args, class_type)


def _doc_text(token: str) -> str:
    # "#: text" -> "text"; everything after the single separating space is kept
    text = token[2:].rstrip("\r")
    return text[1:] if text.startswith(" ") else text


class TreeTransformer(Transformer):
    """Transform parse tree into declarations."""

    def __init__(self, filename: str | None = None) -> None:
        super().__init__()
        self._filename = filename

    def _location(self, name: _Name) -> SourceLocation:
        return SourceLocation(line=name.line, column=name.column, file=self._filename)

    def doc(self, args: list[Any]) -> _Doc:
        return _Doc(value=_doc_text(str(args[0])))

    def name(self, args: list[Any]) -> _Name:
        token: Token = args[0]
        return _Name(value=str(token), line=token.line or 0, column=token.column or 0)

    def dotted_name(self, args: list[Any]) -> _DottedName:
        return _DottedName(value=".".join(str(arg) for arg in args))

    def type_args(self, args: list[Any]) -> _TypeArgs:
        return _TypeArgs(args=_find_many(args, TypeRef))

    def type(self, args: list[Any]) -> TypeRef:
        type_args = _find_one(args, _TypeArgs)
        return TypeRef(
            name=_find_one(args, _DottedName).value,
            args=type_args.args if type_args else [],
        )

    def ident_value(self, args: list[Any]) -> str:
        return str(args[0])

    def number_value(self, args: list[Any]) -> int | float:
        text = str(args[0])
        try:
            return int(text)
        except ValueError:
            return float(text)

    def string_value(self, args: list[Any]) -> str:
        return str(args[0])[1:-1]

    def named_arg(self, args: list[Any]) -> DirectiveArg:
        return DirectiveArg(name=args[0].value, value=args[1])

    def positional_arg(self, args: list[Any]) -> DirectiveArg:
        return DirectiveArg(name=None, value=args[0])

    def directive_args(self, args: list[Any]) -> list[DirectiveArg]:
        return _find_many(args, DirectiveArg)

    def directive(self, args: list[Any]) -> Directive:
        name = _find_one(args, _Name)
        arguments = _find_one(args, list)
        return Directive(
            name=name.value,
            arguments=arguments or [],
            location=self._location(name),
        )

    def field(self, args: list[Any]) -> FieldDecl:
        name = _find_one(args, _Name)
        visibility = Visibility.PRIVATE
        for arg in args:
            if isinstance(arg, Token) and arg.type == "VISIBILITY":
                visibility = Visibility.PUBLIC
        return FieldDecl(
            name=name.value,
            type=_find_one(args, TypeRef),
            visibility=visibility,
            docs=[doc.value for doc in _find_many(args, _Doc)],
            location=self._location(name),
        )

    def variant(self, args: list[Any]) -> VariantDecl:
        name = _find_one(args, _Name)
        return VariantDecl(
            name=name.value,
            payload=_find_one(args, TypeRef),
            docs=[doc.value for doc in _find_many(args, _Doc)],
            location=self._location(name),
        )

    def record(self, args: list[Any]) -> _Body:
        return _Body(
            kind=DeclarationKind.RECORD,
            name=_find_one(args, _Name),
            fields=_find_many(args, FieldDecl),
            variants=[],
            target=None,
        )

    def sum(self, args: list[Any]) -> _Body:
        return _Body(
            kind=DeclarationKind.SUM,
            name=_find_one(args, _Name),
            fields=[],
            variants=_find_many(args, VariantDecl),
            target=None,
        )

    def alias(self, args: list[Any]) -> _Body:
        return _Body(
            kind=DeclarationKind.ALIAS,
            name=_find_one(args, _Name),
            fields=[],
            variants=[],
            target=_find_one(args, TypeRef),
        )

    def declaration(self, args: list[Any]) -> Declaration:
        body: _Body = _find_one(args, _Body)
        return Declaration(
            kind=body.kind,
            name=body.name.value,
            directives=_find_many(args, Directive),
            docs=[doc.value for doc in _find_many(args, _Doc)],
            fields=body.fields,
            variants=body.variants,
            target=body.target,
            location=self._location(body.name),
        )

    def start(self, args: list[Any]) -> list[Declaration]:
        return _find_many(args, Declaration)


def _check_name(name: str, what: str, location: SourceLocation | None) -> None:
    if keyword.iskeyword(name):
        raise ValidationError(f"{what} name `{name}` is a reserved word", location)


def validate(declarations: list[Declaration]) -> None:
    """Validate file-level rules of parsed declarations."""
    seen: dict[str, Declaration] = {}

    for decl in declarations:
        _check_name(decl.name, "declaration", decl.location)
        if decl.name in seen:
            raise ValidationError(
                f"{decl.name} declared more than once (first at {seen[decl.name].location})",
                decl.location,
            )
        seen[decl.name] = decl

        field_names: set[str] = set()
        for f in decl.fields:
            _check_name(f.name, "field", f.location)
            if f.name in RESERVED_FIELD_NAMES:
                raise ValidationError(f"field name `{f.name}` is reserved", f.location)
            if f.name in field_names:
                raise ValidationError(f"{decl.name} has more than one field named {f.name}", f.location)
            field_names.add(f.name)

        variant_names: set[str] = set()
        for v in decl.variants:
            _check_name(v.name, "variant", v.location)
            if v.name in variant_names:
                raise ValidationError(f"{decl.name} has more than one variant named {v.name}", v.location)
            variant_names.add(v.name)


def _syntax_error(err: UnexpectedInput, filename: str | None) -> DeclarationSyntaxError:
    if isinstance(err, UnexpectedEOF) or (
        isinstance(err, UnexpectedToken) and err.token.type == "$END"
    ):
        message = "unexpected end of input"
    elif isinstance(err, UnexpectedToken):
        message = f"unexpected token {str(err.token)!r}"
    elif isinstance(err, UnexpectedCharacters):
        message = f"unexpected character {err.char!r}"
    else:
        message = "invalid syntax"
    location = None
    if isinstance(err.line, int) and err.line > 0:
        location = SourceLocation(line=err.line, column=err.column, file=filename)
    return DeclarationSyntaxError(message, location)


def parse(text: str, filename: str | None = None) -> list[Declaration]:
    """Parse a declaration file."""
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/domain.lark", encoding="utf-8") as f:
            grammar = f.read()

        _g_parser = Lark(grammar, parser="lalr")

    try:
        tree = _g_parser.parse(text)
    except UnexpectedInput as err:
        raise _syntax_error(err, filename) from err

    declarations: list[Declaration] = TreeTransformer(filename).transform(tree)

    validate(declarations)

    return declarations
