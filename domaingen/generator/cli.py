"""Command-line interface for domaingen code generation."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from domaingen.generator import check_all, parse, python
from domaingen.generator.diagnostics import DomainGenError
from domaingen.generator.shape import extract
from domaingen.generator.types import Declaration, DeclarationKind

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)


def _read(input_file: str) -> list[Declaration]:
    with open(input_file, encoding="utf-8") as f:
        text = f.read()
    return parse(text, filename=input_file)


def _fail(err: DomainGenError) -> NoReturn:
    err_console.print(f"[bold red]error[/bold red]: {escape(str(err))}", soft_wrap=True)
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Domain model code generator."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input declaration file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--runtime-import",
    "runtime_import",
    is_flag=False,
    flag_value="domaingen.runtime",
    default=None,
    help="Import path for runtime. No value=domaingen.runtime, omit=domaingen_runtime",
)
def gen(input_file: str, output_file: str, runtime_import: str | None) -> None:
    """Generate a Python module from a declaration file."""
    # Default to a "domaingen_runtime" folder next to the generated module
    import_path = runtime_import if runtime_import is not None else "domaingen_runtime"

    try:
        generated_file = python.render(_read(input_file), runtime_import=import_path)
    except DomainGenError as err:
        _fail(err)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)
    logger.info("Wrote %s", output_file)


@cli.command()
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="domaingen_runtime", help="Runtime folder name")
def runtime(output_path: str, name: str) -> None:
    """Generate runtime support code."""
    runtime_dir = Path(output_path) / name
    runtime_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in python.runtime().items():
        (runtime_dir / filename).write_text(content)
    print(f"Generated Python runtime in {runtime_dir}")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input declaration file")
def check(input_file: str) -> None:
    """Check every directive of a declaration file without generating code."""
    try:
        declarations = _read(input_file)
    except DomainGenError as err:
        _fail(err)

    errors = check_all(declarations)
    for err in errors:
        err_console.print(
            f"[bold red]{err.category}[/bold red]: {escape(str(err))}", soft_wrap=True
        )

    if errors:
        sys.exit(1)

    directives = sum(len(decl.directives) for decl in declarations)
    print(f"{len(declarations)} declarations, {directives} directives OK")


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input declaration file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display declarations and how their field types are classified."""
    try:
        declarations = _read(input_file)
    except DomainGenError as err:
        _fail(err)

    if output_json:
        _output_json(declarations)
    else:
        _output_plain(declarations)


def _output_json(declarations: list[Declaration]) -> None:
    """Output declaration info as JSON."""
    data: dict = {}

    for decl in declarations:
        entry: dict = {
            "kind": decl.kind.value,
            "directives": [d.name for d in decl.directives],
        }
        if decl.kind == DeclarationKind.ALIAS:
            entry["target"] = str(decl.target)
        else:
            descriptor = extract(decl)
            entry["descriptor"] = descriptor.to_dict()
        data[decl.name] = entry

    print(json.dumps(data, indent=2))


def _output_plain(declarations: list[Declaration]) -> None:
    """Output declaration info using rich text formatting."""
    console = Console()

    console.print("[bold cyan]Declarations[/bold cyan]")
    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Name", style="white")
    table.add_column("Kind", style="dim")
    table.add_column("Directives", style="green")
    table.add_column("Members", style="yellow")

    for decl in declarations:
        directives = " ".join(f"@{d.name}" for d in decl.directives)
        descriptor = extract(decl)

        if decl.kind == DeclarationKind.ALIAS:
            members = f"= {decl.target}"
        elif decl.kind == DeclarationKind.RECORD:
            members = ", ".join(
                f"{'pub ' if f.is_public else ''}{f.name}: {f.type_name} ({f.classification})"
                for f in descriptor.fields
            )
        else:
            members = ", ".join(
                f"{v.name}({v.payload_type_name})"
                for v in descriptor.variants
            )

        table.add_row(decl.name, decl.kind.value, directives, escape(members))

    console.print(table)


def main() -> None:
    """Main entry point."""
    cli(auto_envvar_prefix="DOMAINGEN")


if __name__ == "__main__":
    main()
