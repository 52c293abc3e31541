"""Tests for the formgen command-line interface.

Covers schema and data loading, the describe, render and validate commands,
their output formats and exit codes.
"""

import json
from pathlib import Path
import sys
import tempfile

from click.testing import CliRunner
import pytest

from formgen.cli import main
from formgen.cli.describe import describe_command
from formgen.cli.loader import LoadError, load_mapping, load_schema
from formgen.cli.render import render_command
from formgen.cli.validate import validate_command
from formgen.config import FormOptions
from formgen.core.logging import clear_context, configure_logging

SCHEMA_SOURCE = '''
from pydantic import BaseModel, Field


class Address(BaseModel):
    street: str = Field(min_length=1)
    city: str


class Signup(BaseModel):
    name: str = Field(min_length=2)
    age: int = Field(ge=18, le=120)
    employed: bool = False
    company: str | None = None
    address: Address
    tags: list[str] = Field(default_factory=list)
'''


@pytest.fixture
def runner():
    """Create CLI runner for tests."""
    return CliRunner()


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def schema_ref(temp_dir):
    """Reference to the signup schema in a schema file."""
    path = temp_dir / "forms.py"
    path.write_text(SCHEMA_SOURCE)
    return f"{path}:Signup"


@pytest.fixture
def valid_data(temp_dir):
    """JSON file with a valid flat submission."""
    path = temp_dir / "valid.json"
    path.write_text(
        json.dumps(
            {
                "name": "Jane",
                "age": "30",
                "address.street": "1 Main St",
                "address.city": "Springfield",
                "tags[0]": "forms",
            }
        )
    )
    return path


@pytest.fixture
def invalid_data(temp_dir):
    """YAML file with an invalid nested submission."""
    path = temp_dir / "invalid.yaml"
    path.write_text("name: J\nage: '12'\naddress:\n  city: X\n")
    return path


class TestLoader:
    """Test loading schemas and data files."""

    def test_load_from_module(self):
        """Test module:attribute references."""
        assert load_schema("formgen.config:FormOptions") is FormOptions

    def test_load_from_file(self, schema_ref):
        """Test path/to/file.py:attribute references."""
        assert load_schema(schema_ref).__name__ == "Signup"

    @pytest.mark.parametrize(
        "reference",
        [
            "no-colon",
            "formgen.nope:Model",
            "formgen.config:Nope",
            "missing/file.py:Model",
        ],
    )
    def test_invalid_references(self, reference):
        """Test that unresolvable references raise LoadError."""
        with pytest.raises(LoadError):
            load_schema(reference)

    def test_load_mappings(self, valid_data, invalid_data):
        """Test reading JSON and YAML mappings."""
        assert load_mapping(valid_data)["name"] == "Jane"
        assert load_mapping(invalid_data)["address"] == {"city": "X"}

    def test_empty_file(self, temp_dir):
        """Test that an empty file is an empty mapping."""
        path = temp_dir / "empty.yaml"
        path.write_text("")
        assert load_mapping(path) == {}

    def test_list_rejected(self, temp_dir):
        """Test that top-level lists are rejected."""
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(LoadError, match="Expected a mapping"):
            load_mapping(path)

    def test_missing_file(self, temp_dir):
        """Test that missing files raise LoadError."""
        with pytest.raises(LoadError):
            load_mapping(temp_dir / "nope.yaml")


class TestDescribeCommand:
    """Test the describe command."""

    def test_json_output(self, runner, schema_ref):
        """Test descriptors as JSON."""
        result = runner.invoke(describe_command, [schema_ref, "--format", "json"])
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert [entry["name"] for entry in payload] == [
            "name",
            "age",
            "employed",
            "company",
            "address",
            "tags",
        ]
        assert payload[0]["constraints"] == {"required": True, "minLength": 2}
        assert payload[4]["children"][0]["path"] == "address.street"
        assert payload[5]["item"]["path"] == "tags[*]"

    def test_table_output(self, runner, schema_ref):
        """Test the plain listing of every path."""
        result = runner.invoke(describe_command, [schema_ref])
        assert result.exit_code == 0
        assert "address.street" in result.output
        assert "tags[*]" in result.output

    def test_bad_schema(self, runner):
        """Test that unloadable schemas exit with code 2."""
        result = runner.invoke(describe_command, ["missing/file.py:Model"])
        assert result.exit_code == 2
        assert "❌" in result.output


class TestRenderCommand:
    """Test the render command."""

    def test_render_to_stdout(self, runner, schema_ref):
        """Test printing the complete form."""
        result = runner.invoke(render_command, [schema_ref])
        assert result.exit_code == 0
        assert "<style>" in result.output
        assert '<form id="zf-form"' in result.output
        assert 'name="address.street"' in result.output

    def test_options_values_and_theme(self, runner, schema_ref, temp_dir):
        """Test options and values files with a theme override."""
        options = temp_dir / "options.yaml"
        options.write_text(
            "submitLabel: Register\n"
            "conditionalLogic:\n"
            "  company:\n"
            "    controllingField: employed\n"
            "    equals: true\n"
        )
        values = temp_dir / "values.yaml"
        values.write_text("name: Jane\n")

        result = runner.invoke(
            render_command,
            [schema_ref, "--options", str(options), "--values", str(values), "--theme", "light"],
        )
        assert result.exit_code == 0
        assert "zf-theme-light" in result.output
        assert ">Register</button>" in result.output
        assert 'value="Jane"' in result.output
        assert 'data-path="company" data-kind="text" hidden>' in result.output

    def test_output_directory(self, runner, schema_ref, temp_dir):
        """Test writing separate artifact files."""
        target = temp_dir / "build"
        result = runner.invoke(render_command, [schema_ref, "-o", str(target)])
        assert result.exit_code == 0
        assert "Form written to" in result.output
        assert (target / "form.html").exists()
        assert (target / "form.css").exists()
        assert (target / "form.js").exists()
        assert '<link rel="stylesheet" href="form.css">' in (target / "form.html").read_text()

    def test_invalid_options(self, runner, schema_ref, temp_dir):
        """Test that invalid options exit with code 2."""
        options = temp_dir / "options.yaml"
        options.write_text("layout: diagonal\n")
        result = runner.invoke(render_command, [schema_ref, "--options", str(options)])
        assert result.exit_code == 2


class TestValidateCommand:
    """Test the validate command."""

    def test_valid_data_json(self, runner, schema_ref, valid_data):
        """Test a valid submission with JSON output."""
        result = runner.invoke(
            validate_command, [schema_ref, str(valid_data), "--format", "json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {"valid": True, "errors": {}}

    def test_invalid_data_json(self, runner, schema_ref, invalid_data):
        """Test that errors are keyed by path and exit with code 1."""
        result = runner.invoke(
            validate_command, [schema_ref, str(invalid_data), "--format", "json"]
        )
        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload["valid"] is False
        assert set(payload["errors"]) == {"name", "age", "address.street"}

    def test_plain_output(self, runner, schema_ref, invalid_data):
        """Test the plain text summary outside a terminal."""
        result = runner.invoke(validate_command, [schema_ref, str(invalid_data)])
        assert result.exit_code == 1
        assert "❌ Invalid (3 errors)" in result.output
        assert "  - address.street: Field required" in result.output

    def test_single_field_json(self, runner, schema_ref):
        """Test validating one field with JSON output."""
        result = runner.invoke(
            validate_command,
            [schema_ref, "--field", "name", "--value", "J", "--format", "json"],
        )
        assert result.exit_code == 1
        assert json.loads(result.output) == {
            "field": "name",
            "valid": False,
            "message": "String should have at least 2 characters",
        }

    def test_single_field_valid(self, runner, schema_ref):
        """Test the plain output of a valid field."""
        result = runner.invoke(
            validate_command, [schema_ref, "--field", "name", "--value", "Jane"]
        )
        assert result.exit_code == 0
        assert "✅ name: valid" in result.output

    def test_unknown_field(self, runner, schema_ref):
        """Test that unknown fields exit with code 2."""
        result = runner.invoke(
            validate_command, [schema_ref, "--field", "nope", "--value", "x"]
        )
        assert result.exit_code == 2

    def test_conditional_logic_from_options(self, runner, schema_ref, temp_dir):
        """Test that hidden fields are skipped."""
        options = temp_dir / "options.yaml"
        options.write_text(
            "conditionalLogic:\n"
            "  address:\n"
            "    controllingField: employed\n"
            "    equals: true\n"
        )
        data = temp_dir / "data.yaml"
        data.write_text("name: Jane\nage: '30'\n")
        result = runner.invoke(
            validate_command, [schema_ref, str(data), "--options", str(options)]
        )
        assert result.exit_code == 0

    def test_requires_data_or_field(self, runner, schema_ref):
        """Test that one of DATA or --field is required."""
        result = runner.invoke(validate_command, [schema_ref])
        assert result.exit_code == 2

    def test_missing_data_file(self, runner, schema_ref, temp_dir):
        """Test that a missing data file exits with code 2."""
        result = runner.invoke(validate_command, [schema_ref, str(temp_dir / "nope.json")])
        assert result.exit_code == 2


class TestMainGroup:
    """Test the command group."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        """Undo the logging setup done by the group."""
        yield
        clear_context()
        configure_logging(environment="testing", log_level="WARNING", stream=sys.__stderr__)

    def test_version(self, runner):
        """Test the version option."""
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_subcommand_through_group(self, runner, schema_ref):
        """Test running a subcommand with a log level."""
        result = runner.invoke(
            main, ["--log-level", "WARNING", "describe", schema_ref, "--format", "json"]
        )
        assert result.exit_code == 0
        assert json.loads(result.output)[0]["name"] == "name"
