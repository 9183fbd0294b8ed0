"""CLI tests for capnp-scaffold-generator.

Tests cover:
- Argument parsing and defaults
- Generator options from flags and the parameter string
- Schema file discovery (globs, directories, excludes, recursion)
- End-to-end runs and their exit codes
"""

from __future__ import annotations

import argparse

import pytest
from conftest import BILLING_SCHEMA_SOURCE

from capnp_scaffold_generator.cli import main, setup_parser
from capnp_scaffold_generator.options import GeneratorOptions
from capnp_scaffold_generator.run import find_schema_files


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A working directory with schemas below `org/example`."""
    package_dir = tmp_path / "org" / "example"
    package_dir.mkdir(parents=True)
    (package_dir / "billing.capnp").write_text(BILLING_SCHEMA_SOURCE)

    (package_dir / "audit.capnp").write_text("""
@0xdbb9ad1f14bf0b50;

struct Entry {
  text @0 :Text;
}

interface Audit {
  record @0 Entry -> Entry;
}
""")

    nested_dir = package_dir / "internal"
    nested_dir.mkdir()
    (nested_dir / "health.capnp").write_text("""
@0xdbb9ad1f14bf0b51;

interface Health {
  check @0 () -> (ok :Bool);
}
""")

    monkeypatch.chdir(tmp_path)
    yield tmp_path


class TestArgumentParsing:
    """Test argument parsing."""

    def test_parser_setup(self):
        parser = setup_parser()
        assert isinstance(parser, argparse.ArgumentParser)
        assert parser.description is not None

    def test_default_arguments(self):
        args = setup_parser().parse_args([])

        assert args.paths == ["**/*.capnp"]
        assert args.excludes == []
        assert args.output_dir == ""
        assert args.import_paths == []
        assert args.recursive is False
        assert args.legacy_dialect is False
        assert args.js_path is None
        assert args.java_package is None
        assert args.runtime_package is None
        assert args.parameter == ""
        assert args.verbose is False

    def test_combined_arguments(self):
        args = setup_parser().parse_args(
            ["-p", "schemas/", "-o", "output/", "-I", "/usr/include", "-r", "-e", "schemas/test.capnp", "--nano"]
        )

        assert args.paths == ["schemas/"]
        assert args.output_dir == "output/"
        assert args.import_paths == ["/usr/include"]
        assert args.recursive is True
        assert args.excludes == ["schemas/test.capnp"]
        assert args.legacy_dialect is True


class TestOptionsFromArguments:
    """Test how flags and the parameter string combine."""

    def test_defaults(self):
        args = setup_parser().parse_args([])
        assert GeneratorOptions.from_args(args) == GeneratorOptions()

    def test_parameter_string(self):
        args = setup_parser().parse_args(["--parameter", "nano=true,js_path=web"])
        options = GeneratorOptions.from_args(args)

        assert options.legacy_dialect is True
        assert options.client_root == "web/"

    def test_flags_override_parameter(self):
        args = setup_parser().parse_args(["--parameter", "js_path=web", "--js-path", "static/"])
        assert GeneratorOptions.from_args(args).client_root == "static/"

    def test_package_flags(self):
        args = setup_parser().parse_args(["--java-package", "com.acme", "--runtime-package", "com.acme.rpc"])
        options = GeneratorOptions.from_args(args)

        assert options.java_package == "com.acme"
        assert options.runtime_package == "com.acme.rpc"


class TestFindSchemaFiles:
    """Test the discovery of schema files."""

    def test_glob(self, workspace):
        found = find_schema_files(["org/example/*.capnp"], [], False, str(workspace))
        assert found == [
            str(workspace / "org/example/audit.capnp"),
            str(workspace / "org/example/billing.capnp"),
        ]

    def test_directory(self, workspace):
        found = find_schema_files(["org/example"], [], False, str(workspace))
        assert len(found) == 2

    def test_directory_recursive(self, workspace):
        found = find_schema_files(["org"], [], True, str(workspace))
        assert found[-1] == str(workspace / "org/example/internal/health.capnp")
        assert len(found) == 3

    def test_recursive_glob(self, workspace):
        assert len(find_schema_files(["**/*.capnp"], [], True, str(workspace))) == 3

    def test_excludes(self, workspace):
        found = find_schema_files(["org/example"], ["org/example/audit.capnp"], False, str(workspace))
        assert found == [str(workspace / "org/example/billing.capnp")]

    def test_exclude_glob(self, workspace):
        found = find_schema_files(["**/*.capnp"], ["**/internal/*.capnp"], True, str(workspace))
        assert len(found) == 2


class TestMain:
    """End-to-end runs of the command line."""

    def test_billing(self, workspace):
        result = main(["-p", "org/example/billing.capnp", "-o", "out"])

        assert result == 0
        out = workspace / "out"
        assert (out / "org/example/handlers/AbstractChargeHandler.java").is_file()
        assert (out / "org/example/BillingService.java").is_file()
        assert (out / "src/main/webapp/build/scripts/Billing.js").is_file()
        assert (out / "src/main/webapp/build/scripts/CreditCard.js").is_file()
        assert (out / "src/main/webapp/build/scripts/Receipt.js").is_file()
        assert (out / "src/main/webapp/build/scripts/Constants.js").is_file()
        assert (out / "src/main/webapp/build/res/billing.capnp").read_text() == BILLING_SCHEMA_SOURCE

    def test_nano_and_js_path(self, workspace):
        result = main(["-p", "org/example/billing.capnp", "-o", "out", "--nano", "--js-path", "web"])

        assert result == 0
        out = workspace / "out"
        service = (out / "org/example/nano/BillingService.java").read_text()
        assert service.startswith("package org.example.nano;\n")
        assert (out / "web/build/scripts/Billing.js").is_file()

    def test_java_package(self, workspace):
        result = main(["-p", "org/example/billing.capnp", "-o", "out", "--java-package", "com.acme"])

        assert result == 0
        handler = (workspace / "out/com/acme/handlers/AbstractChargeHandler.java").read_text()
        assert "import com.acme.CreditCard;" in handler

    def test_several_schemas(self, workspace):
        result = main(["-p", "org", "-r", "-o", "out"])

        assert result == 0
        out = workspace / "out"
        assert (out / "org/example/AuditService.java").is_file()
        assert (out / "org/example/internal/HealthService.java").is_file()
        assert (out / "src/main/webapp/build/scripts/Health.js").is_file()

    def test_constants_list_every_schema(self, workspace):
        result = main(["-p", "org/example/billing.capnp", "org/example/audit.capnp", "-o", "out"])

        assert result == 0
        constants = (workspace / "out/src/main/webapp/build/scripts/Constants.js").read_text()
        assert constants == "define(function() {\n  return {\n    AuditPath: '',\n    BillingPath: ''\n  };\n});\n"

    def test_parameter_list_methods_have_loaders(self, workspace):
        result = main(["-p", "org/example/internal/health.capnp", "-o", "out"])

        assert result == 0
        scripts = workspace / "out/src/main/webapp/build/scripts"
        stub = (scripts / "Health.js").read_text()
        assert stub.startswith("define(['capnp', 'constants', 'checkParams', 'checkResults'], ")
        assert sorted(path.name for path in scripts.iterdir()) == [
            "CheckParams.js",
            "CheckResults.js",
            "Constants.js",
            "Health.js",
        ]
        loader = (scripts / "CheckParams.js").read_text()
        assert "loadSchemaFile('build/res/health.capnp')" in loader
        assert "build('Health.check$Params')" in loader

    def test_no_schema_files(self, workspace, caplog):
        assert main(["-p", "missing/*.capnp", "-o", "out"]) == 0
        assert "No schema files found." in caplog.text

    def test_invalid_schema(self, workspace):
        (workspace / "broken.capnp").write_text("@0xdbb9ad1f14bf0b52;\nstruct {\n")

        result = main(["-p", "broken.capnp", "org/example/billing.capnp", "-o", "out"])

        assert result == 1
        assert (workspace / "out/org/example/BillingService.java").is_file()

    def test_unwritable_output(self, workspace):
        (workspace / "out").write_text("not a directory")
        assert main(["-p", "org/example/billing.capnp", "-o", "out"]) == 1
