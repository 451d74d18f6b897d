"""
Verification fixtures.

One fixture per target language, plus the JSON Schema round trip.
"""

from .base import Fixture, FixtureKind
from .csharp import CSharpFixture
from .errors import FixtureNotFoundError
from .golang import GoFixture
from .json_schema import JsonSchemaFixture
from .registry import FixtureRegistry, build_default_registry

__all__ = [
    "Fixture",
    "FixtureKind",
    "CSharpFixture",
    "FixtureNotFoundError",
    "GoFixture",
    "JsonSchemaFixture",
    "FixtureRegistry",
    "build_default_registry",
]
