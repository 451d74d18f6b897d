"""
Fixture Tests - per-kind verify procedures and the registry.

Tests verify that:
- JSON Schema round trip stages fail hard where they must
- Known-failure samples are relaxed, not silently dropped
- The default catalog matches the repository layout
- Registry identity is the fixture name
"""

from pathlib import Path

import pytest

from fixture_matrix.execution import (
    QuicktypeGenerator,
    SchemaValidationError,
    TaskOutcome,
    TaskRunner,
    VerificationError,
    WorkItem,
)
from fixture_matrix.fixtures import (
    CSharpFixture,
    FixtureKind,
    FixtureNotFoundError,
    FixtureRegistry,
    GoFixture,
    JsonSchemaFixture,
    build_default_registry,
)
from fixture_matrix.fixtures.csharp import CSHARP_OUTPUT, DOTNET_RESTORE
from fixture_matrix.fixtures.golang import GO_OUTPUT
from fixture_matrix.samples import load_sample
from fixture_matrix.settings import MatrixSettings


def _run(fixture, sample_path, settings, fake_quicktype):
    runner = TaskRunner([fixture], QuicktypeGenerator(fake_quicktype), settings, total=1)
    item = WorkItem(sample=load_sample(sample_path), fixture_name=fixture.name)
    return runner.run(item, 0)


# =============================================================================
# JSON Schema round trip
# =============================================================================

class TestJsonSchemaFixture:

    def test_round_trip_passes(self, settings, make_template, make_sample, fake_quicktype, program_command):
        fixture = JsonSchemaFixture(name="json-schema", base=make_template(), run_command=program_command)
        result = _run(fixture, make_sample("a.json", {"a": [1, 2]}), settings, fake_quicktype)
        assert result.outcome == TaskOutcome.PASSED

    def test_schema_not_validating_sample_is_hard(self, settings, make_template, make_sample, fake_quicktype, program_command):
        fixture = JsonSchemaFixture(
            name="json-schema",
            base=make_template("WRONG_TYPE"),
            run_command=program_command,
        )
        with pytest.raises(SchemaValidationError) as info:
            _run(fixture, make_sample("a.json", {"a": 1}), settings, fake_quicktype)
        assert info.value.sample.endswith("a.json")

    def test_schema_not_idempotent_is_hard(self, settings, make_template, make_sample, fake_quicktype, program_command):
        fixture = JsonSchemaFixture(
            name="json-schema",
            base=make_template("BAD_SCHEMA"),
            run_command=program_command,
        )
        with pytest.raises(VerificationError, match="Schema generated from schema") as info:
            _run(fixture, make_sample("a.json", {"a": 1}), settings, fake_quicktype)
        assert info.value.mismatch.path == "$.title"

    def test_go_mismatch_is_tolerated(self, settings, make_template, make_sample, fake_quicktype, program_command):
        fixture = JsonSchemaFixture(
            name="json-schema",
            base=make_template("MANGLE"),
            run_command=program_command,
        )
        result = _run(fixture, make_sample("a.json", {"a": 1}), settings, fake_quicktype)
        assert result.outcome == TaskOutcome.TOLERATED_MISMATCH
        assert len(result.mismatches) == 1

    def test_known_failure_skips_go_comparison(self, settings, make_template, make_sample, fake_quicktype, program_command):
        fixture = JsonSchemaFixture(
            name="json-schema",
            base=make_template("MANGLE"),
            known_failures=["identifiers.json"],
            run_command=program_command,
        )
        result = _run(fixture, make_sample("identifiers.json", {"a": 1}), settings, fake_quicktype)
        assert result.outcome == TaskOutcome.PASSED

    def test_known_failure_still_checks_idempotence(self, settings, make_template, make_sample, fake_quicktype, program_command):
        fixture = JsonSchemaFixture(
            name="json-schema",
            base=make_template("BAD_SCHEMA"),
            known_failures=["identifiers.json"],
            run_command=program_command,
        )
        with pytest.raises(VerificationError):
            _run(fixture, make_sample("identifiers.json", {"a": 1}), settings, fake_quicktype)


# =============================================================================
# Go
# =============================================================================

class TestGoFixture:

    def test_known_failure_compares_tolerantly(self, settings, make_template, make_sample, fake_quicktype, program_command):
        fixture = GoFixture(
            name="golang",
            base=make_template("MANGLE"),
            known_failures=["identifiers.json"],
            run_command=program_command,
        )
        result = _run(fixture, make_sample("identifiers.json", {"a": 1}), settings, fake_quicktype)

        assert result.outcome == TaskOutcome.TOLERATED_MISMATCH
        assert result.mismatches[0].mode.value == "tolerant"

    def test_will_fail_by_basename(self):
        fixture = GoFixture(name="golang", base=Path("/t"), known_failures=["identifiers.json"])
        assert fixture.will_fail(Path("/anywhere/identifiers.json"))
        assert not fixture.will_fail(Path("/anywhere/other.json"))

    def test_default_run_command(self):
        fixture = GoFixture(name="golang", base=Path("/t"))
        assert fixture.run_command == ["go", "run", "main.go", GO_OUTPUT]
        assert fixture.diff_via_schema


# =============================================================================
# Registry
# =============================================================================

class TestRegistry:

    def test_default_catalog(self, tmp_path):
        registry = build_default_registry(MatrixSettings(project_root=tmp_path))

        assert registry.names == ["csharp", "golang", "json-schema"]

        csharp = registry.get("csharp")
        assert csharp.kind == FixtureKind.CSHARP
        assert csharp.base == tmp_path / "test" / "csharp"
        assert csharp.output == CSHARP_OUTPUT
        assert csharp.setup_command == list(DOTNET_RESTORE)
        assert not csharp.diff_via_schema

        golang = registry.get("golang")
        assert golang.base == tmp_path / "test" / "golang"
        assert golang.output == GO_OUTPUT
        assert golang.setup_command is None
        assert golang.diff_via_schema

        schema = registry.get("json-schema")
        assert schema.base == tmp_path / "test" / "golang"
        assert schema.output == "schema.json"

    def test_known_failures_from_settings(self, tmp_path):
        settings = MatrixSettings(project_root=tmp_path, known_go_failures=("odd.json",))
        golang = build_default_registry(settings).get("golang")
        assert golang.will_fail(Path("odd.json"))
        assert not golang.will_fail(Path("identifiers.json"))

    def test_select_all(self, tmp_path):
        registry = build_default_registry(MatrixSettings(project_root=tmp_path))
        assert [f.name for f in registry.select()] == registry.names

    def test_select_one(self, tmp_path):
        registry = build_default_registry(MatrixSettings(project_root=tmp_path))
        assert [f.name for f in registry.select("golang")] == ["golang"]

    def test_select_unknown_is_empty(self, tmp_path):
        registry = build_default_registry(MatrixSettings(project_root=tmp_path))
        assert registry.select("rust") == []

    def test_get_unknown(self):
        with pytest.raises(FixtureNotFoundError):
            FixtureRegistry().get("rust")

    def test_duplicate_name_rejected(self):
        registry = FixtureRegistry([GoFixture(name="golang", base=Path("/a"))])
        with pytest.raises(ValueError):
            registry.register(CSharpFixture(name="golang", base=Path("/b")))

    def test_list_fixtures(self, tmp_path):
        registry = build_default_registry(MatrixSettings(project_root=tmp_path))
        listing = {info["name"]: info for info in registry.list_fixtures()}

        assert listing["csharp"]["setup"] == "dotnet restore"
        assert listing["golang"]["diff_via_schema"] is True
        assert listing["json-schema"]["kind"] == "json-schema"
        assert len(registry) == 3
