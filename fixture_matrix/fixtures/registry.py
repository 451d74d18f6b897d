"""
Fixture registry.

Design rules:
- Static, ordered catalog defined once at startup
- Fixture identity is the name (duplicates rejected)
- Selection filters the catalog, never alters fixture definitions
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from ..settings import MatrixSettings
from .base import Fixture
from .csharp import CSharpFixture
from .errors import FixtureNotFoundError
from .golang import GoFixture
from .json_schema import JsonSchemaFixture

logger = logging.getLogger(__name__)


class FixtureRegistry:
    """
    Registry of verification fixtures.

    Provides:
    - Lookup by name
    - Ordered iteration
    - Single-fixture selection
    """

    def __init__(self, fixtures: Iterable[Fixture] = ()):
        self._fixtures: Dict[str, Fixture] = {}
        for fixture in fixtures:
            self.register(fixture)

    def register(self, fixture: Fixture) -> None:
        if fixture.name in self._fixtures:
            raise ValueError(f"Fixture '{fixture.name}' is already registered")
        self._fixtures[fixture.name] = fixture

    def get(self, name: str) -> Fixture:
        """
        Get fixture by name.

        Raises:
            FixtureNotFoundError: If no fixture has this name
        """
        fixture = self._fixtures.get(name)
        if fixture is None:
            raise FixtureNotFoundError(name)
        return fixture

    def select(self, name: Optional[str] = None) -> List[Fixture]:
        """
        Fixtures to run, in registry order.

        Args:
            name: Only run this fixture (None selects all)

        Returns:
            Selected fixtures (empty if name is unknown)
        """
        if name is None:
            return list(self._fixtures.values())

        selected = [f for f in self._fixtures.values() if f.name == name]
        if not selected:
            logger.warning(
                f"[Fixtures] No fixture named '{name}'. Known: {', '.join(self.names)}"
            )
        return selected

    @property
    def names(self) -> List[str]:
        return list(self._fixtures)

    def list_fixtures(self) -> List[dict]:
        """Fixture summaries for display."""
        return [
            {
                "name": f.name,
                "kind": f.kind.value,
                "base": str(f.base),
                "output": f.output,
                "setup": " ".join(f.setup_command) if f.setup_command else None,
                "diff_via_schema": f.diff_via_schema,
            }
            for f in self._fixtures.values()
        ]

    def __iter__(self) -> Iterator[Fixture]:
        return iter(list(self._fixtures.values()))

    def __len__(self) -> int:
        return len(self._fixtures)


def build_default_registry(settings: MatrixSettings) -> FixtureRegistry:
    """
    The standard fixture catalog.

    Template paths resolve against settings.project_root.
    """
    root = settings.project_root
    known = settings.known_go_failures
    return FixtureRegistry([
        CSharpFixture(
            name="csharp",
            base=root / "test" / "csharp",
        ),
        GoFixture(
            name="golang",
            base=root / "test" / "golang",
            known_failures=known,
        ),
        JsonSchemaFixture(
            name="json-schema",
            base=root / "test" / "golang",
            known_failures=known,
        ),
    ])
