"""Tests for CLI interface."""

import json
import os
import tempfile

from click.testing import CliRunner

from domaingen.generator.cli import cli

FILE_DIR = os.path.dirname(os.path.realpath(__file__))


def describe_gen_command():
    def generates_python_code(expect):
        runner = CliRunner()
        with tempfile.NamedTemporaryFile(suffix=".py", delete=False) as f:
            output_file = f.name

        try:
            result = runner.invoke(
                cli,
                ["gen", "-i", f"{FILE_DIR}/users.domain", "-o", output_file],
            )
            expect(result.exit_code) == 0
            with open(output_file) as f:
                content = f.read()
            expect("class User(AggregateRoot):" in content) == True
            expect("from domaingen_runtime import (" in content) == True
        finally:
            os.unlink(output_file)

    def accepts_runtime_import_without_value(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            output_file = os.path.join(tmpdir, "users.py")
            result = runner.invoke(
                cli,
                ["gen", "-i", f"{FILE_DIR}/users.domain", "-o", output_file, "--runtime-import"],
            )
            expect(result.exit_code) == 0
            with open(output_file) as f:
                expect("\nfrom domaingen.runtime import (" in f.read()) == True

    def reads_runtime_import_from_environment(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            output_file = os.path.join(tmpdir, "users.py")
            result = runner.invoke(
                cli,
                ["gen", "-i", f"{FILE_DIR}/users.domain", "-o", output_file],
                auto_envvar_prefix="DOMAINGEN",
                env={"DOMAINGEN_GEN_RUNTIME_IMPORT": "app.model.runtime"},
            )
            expect(result.exit_code) == 0
            with open(output_file) as f:
                expect("from app.model.runtime import (" in f.read()) == True

    def fails_on_directive_errors(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            output_file = os.path.join(tmpdir, "broken.py")
            result = runner.invoke(
                cli,
                ["gen", "-i", f"{FILE_DIR}/broken.domain", "-o", output_file],
            )
            expect(result.exit_code) == 1
            expect("@entity on Session" in result.output) == True
            expect(os.path.exists(output_file)) == False

    def fails_with_missing_input(expect):
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["gen", "-i", "/nonexistent/file.domain", "-o", "/tmp/out.py"],
        )
        expect(result.exit_code) != 0

    def requires_all_options(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["gen"])
        expect(result.exit_code) != 0
        expect("Missing option" in result.output) == True


def describe_runtime_command():
    def generates_python_runtime(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(cli, ["runtime", "-o", tmpdir])
            expect(result.exit_code) == 0
            runtime_dir = os.path.join(tmpdir, "domaingen_runtime")
            expect(os.path.isdir(runtime_dir)) == True
            expect(os.path.isfile(os.path.join(runtime_dir, "__init__.py"))) == True
            expect(os.path.isfile(os.path.join(runtime_dir, "contracts.py"))) == True

    def uses_custom_folder_name(expect):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(cli, ["runtime", "-o", tmpdir, "--name", "ddd"])
            expect(result.exit_code) == 0
            expect(os.path.isdir(os.path.join(tmpdir, "ddd"))) == True


def describe_check_command():
    def passes_valid_files(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["check", "-i", f"{FILE_DIR}/users.domain"])
        expect(result.exit_code) == 0
        expect("OK" in result.output) == True

    def reports_every_failing_declaration(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["check", "-i", f"{FILE_DIR}/broken.domain"])
        expect(result.exit_code) == 1
        expect("@entity on Session" in result.output) == True
        expect("@domain_events on NotASum" in result.output) == True
        expect("Email" in result.output) == False


def describe_info_command():
    def outputs_json(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-i", f"{FILE_DIR}/users.domain", "--json"])
        expect(result.exit_code) == 0

        data = json.loads(result.output)
        expect(data["UserId"]["target"]) == "Uuid"
        expect(data["User"]["directives"]) == ["entity"]
        fields = data["User"]["descriptor"]["fields"]
        expect([f["classification"] for f in fields[:2]]) == ["identifier", "timestamp"]

    def outputs_table(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["info", "-i", f"{FILE_DIR}/users.domain"])
        expect(result.exit_code) == 0
        expect("Declarations" in result.output) == True


def describe_main_group():
    def shows_help(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        expect(result.exit_code) == 0
        expect("gen" in result.output) == True
        expect("check" in result.output) == True

    def enables_debug_logging(expect):
        runner = CliRunner()
        result = runner.invoke(cli, ["-v", "check", "-i", f"{FILE_DIR}/users.domain"])
        expect(result.exit_code) == 0
