"""
Pytest configuration for the fixture-matrix test suite.

Provides a stand-in code generator and fixture templates so matrix runs
exercise real subprocesses and real sandboxes without node, go or dotnet.

Fake generator behaviour (driven by marker files in the sandbox):
- json -> *.json: writes a minimal draft-07 schema for the sample
- json-schema -> *.json: copies the schema through (idempotent)
- any -> code file: writes a fixed stub
- DIFFER: code stub mentions the source language (schema diff differs)
- BAD_SCHEMA: json-schema -> *.json adds a key (not idempotent)
- WRONG_TYPE: json -> *.json declares the wrong top-level type
- FAIL_GENERATE: exits 3

Fake program (main.py) echoes JSON from argv[1] or stdin.
- MANGLE: prints {"mangled": true} instead
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable, List

import pytest

from fixture_matrix.settings import MatrixSettings


FAKE_QUICKTYPE = '''
import json
import os
import shutil
import sys


def arg(name):
    return sys.argv[sys.argv.index(name) + 1]


src = arg("--src")
lang = arg("--srcLang")
out = arg("-o")

if os.path.exists("FAIL_GENERATE"):
    sys.stderr.write("generator refused\\n")
    sys.exit(3)

TYPES = {dict: "object", list: "array", str: "string", bool: "boolean", type(None): "null"}

if out.endswith(".json"):
    if lang == "json":
        with open(src) as f:
            value = json.load(f)
        kind = TYPES.get(type(value), "number")
        if os.path.exists("WRONG_TYPE"):
            kind = "string" if kind != "string" else "number"
        schema = {"$schema": "http://json-schema.org/draft-07/schema#", "type": kind}
        with open(out, "w") as f:
            json.dump(schema, f)
    else:
        with open(src) as f:
            schema = json.load(f)
        if os.path.exists("BAD_SCHEMA"):
            schema["title"] = "drifted"
        with open(out, "w") as f:
            json.dump(schema, f)
else:
    stub = "// generated code\\n"
    if os.path.exists("DIFFER"):
        stub = "// generated from " + lang + "\\n"
    with open(out, "w") as f:
        f.write(stub)
'''

FAKE_PROGRAM = '''
import json
import os
import sys

if len(sys.argv) > 1:
    with open(sys.argv[1]) as f:
        value = json.load(f)
else:
    value = json.load(sys.stdin)

if os.path.exists("MANGLE"):
    value = {"mangled": True}

print(json.dumps(value))
'''


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (spawn many subprocesses)"
    )
    config.addinivalue_line(
        "markers", "e2e: marks tests as end-to-end (full CLI run with a fake generator)"
    )


# =============================================================================
# Generator and program stand-ins
# =============================================================================

@pytest.fixture(scope="session")
def fake_quicktype(tmp_path_factory) -> List[str]:
    """Generator command prefix for the fake code generator."""
    script = tmp_path_factory.mktemp("bin") / "fake_quicktype.py"
    script.write_text(FAKE_QUICKTYPE)
    return [sys.executable, str(script)]


@pytest.fixture
def program_command() -> List[str]:
    """Run command for the echo program inside a template."""
    return [sys.executable, "main.py"]


@pytest.fixture
def make_template(tmp_path) -> Callable[..., Path]:
    """
    Factory for fixture template directories.

    Usage:
        template = make_template("DIFFER", name="golang")
    """
    def _make(*markers: str, name: str = "template") -> Path:
        template = tmp_path / "templates" / name
        template.mkdir(parents=True)
        (template / "main.py").write_text(FAKE_PROGRAM)
        for marker in markers:
            (template / marker).write_text("")
        return template

    return _make


@pytest.fixture
def make_sample(tmp_path) -> Callable[..., Path]:
    """Factory writing JSON samples into a samples directory."""
    directory = tmp_path / "samples"
    directory.mkdir()

    def _make(name: str, value: Any) -> Path:
        path = directory / name
        path.write_text(json.dumps(value))
        return path

    return _make


@pytest.fixture
def settings(tmp_path, fake_quicktype) -> MatrixSettings:
    """Settings for a local (non-CI) run with the fake generator."""
    return MatrixSettings(
        project_root=tmp_path,
        quicktype_command=fake_quicktype,
        tmp_root=tmp_path / "sandboxes",
        workers=2,
        seed=1234,
    )
