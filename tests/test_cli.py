"""
CLI Tests - exit codes and output.

The CLI is a dispatcher: configuration and discovery errors exit 4,
an aborted run exits 1, a clean run exits 0.
"""

import argparse
import json
import shlex

import pytest

from fixture_matrix.cli import EXIT_HARD_FAILURE, EXIT_SUCCESS, EXIT_SYSTEM_ERROR, build_parser, main, positive_int
from fixture_matrix.settings import MAX_SAMPLE_BYTES

ENV_VARS = (
    "CI",
    "TRAVIS_BRANCH",
    "TRAVIS_EVENT_TYPE",
    "TRAVIS_PULL_REQUEST",
    "CPUs",
    "FIXTURE",
    "DEBUG",
    "MATRIX_SEED",
    "MATRIX_KEEP_SANDBOXES",
    "MATRIX_FAIL_ON_MISMATCH",
    "MATRIX_KNOWN_GO_FAILURES",
)


@pytest.fixture
def project(tmp_path, monkeypatch, fake_quicktype, make_template):
    """A project root with a golang template whose generator always fails."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    golang = tmp_path / "test" / "golang"
    golang.parent.mkdir(parents=True)
    make_template("FAIL_GENERATE").rename(golang)

    monkeypatch.setenv("MATRIX_PROJECT_ROOT", str(tmp_path))
    monkeypatch.setenv("MATRIX_QUICKTYPE", shlex.join(fake_quicktype))
    return tmp_path


class TestParser:

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.sources == []
        assert args.workers is None
        assert not args.json

    def test_flags(self):
        args = build_parser().parse_args(["-w", "3", "-f", "golang", "--seed", "9", "a.json", "b.json"])
        assert args.workers == 3
        assert args.fixture == "golang"
        assert args.seed == 9
        assert args.sources == ["a.json", "b.json"]

    @pytest.mark.parametrize("value", ["0", "-2", "two"])
    def test_workers_must_be_positive(self, value, capsys):
        with pytest.raises(SystemExit) as info:
            build_parser().parse_args(["--workers", value])
        assert info.value.code == 2
        assert "--workers" in capsys.readouterr().err

    def test_positive_int(self):
        assert positive_int("1") == 1
        with pytest.raises(argparse.ArgumentTypeError):
            positive_int("0")


@pytest.mark.e2e
class TestMain:

    def test_list_fixtures(self, project, capsys):
        assert main(["--list-fixtures"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "csharp" in out
        assert "golang" in out
        assert "json-schema" in out
        assert "dotnet restore" in out

    def test_missing_sample(self, project, capsys):
        assert main(["--fixture", "golang", str(project / "missing.json")]) == EXIT_SYSTEM_ERROR
        assert "Sample not found" in capsys.readouterr().err

    def test_missing_default_sample_dir(self, project):
        assert main(["--fixture", "golang"]) == EXIT_SYSTEM_ERROR

    def test_unknown_fixture(self, project, make_sample, capsys):
        sample = make_sample("a.json", {"a": 1})
        assert main(["--fixture", "rust", str(sample)]) == EXIT_SYSTEM_ERROR
        assert "No fixtures selected" in capsys.readouterr().err

    def test_fixture_from_environment(self, project, make_sample, monkeypatch):
        monkeypatch.setenv("FIXTURE", "rust")
        assert main([str(make_sample("a.json", {}))]) == EXIT_SYSTEM_ERROR

    def test_bad_cpus(self, project, monkeypatch, capsys):
        monkeypatch.setenv("CPUs", "lots")
        assert main(["--list-fixtures"]) == EXIT_SYSTEM_ERROR
        assert "Invalid configuration" in capsys.readouterr().err

    def test_hard_failure_exits_one(self, project, make_sample, capsys):
        sample = make_sample("a.json", {"a": 1})

        code = main([
            "--fixture", "golang",
            "--workers", "1",
            "--tmp-dir", str(project / "sandboxes"),
            "--json",
            str(sample),
        ])

        assert code == EXIT_HARD_FAILURE
        captured = capsys.readouterr()
        report = json.loads(captured.out)
        assert report["ok"] is False
        assert report["counts"]["failed"] == 1
        assert "--srcLang json" in report["results"][0]["command"]
        assert "command:" in captured.err

    def test_oversized_samples_only(self, project, tmp_path, capsys):
        huge = tmp_path / "huge.json"
        with open(huge, "wb") as f:
            f.truncate(MAX_SAMPLE_BYTES + 1)

        code = main(["--fixture", "golang", "--tmp-dir", str(tmp_path / "sb"), str(huge)])

        assert code == EXIT_SUCCESS
        assert "OK: 1/1" in capsys.readouterr().err
