"""
Fixture registry errors.
"""


class FixtureNotFoundError(Exception):
    """Raised when a fixture is requested by a name the registry does not know."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Fixture '{name}' is not registered")
