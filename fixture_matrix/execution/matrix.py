"""
Task matrix construction.

The matrix is the cross product fixtures x samples, shuffled.

Shuffling spreads slow/large samples across workers and surfaces
cross-fixture failures early instead of finishing one fixture first.
random.Random.shuffle is a Fisher-Yates shuffle: every ordering is
equally likely.
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..fixtures.base import Fixture
from ..samples.discovery import Sample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkItem:
    """
    One (sample, fixture) pair: the unit of scheduling.

    Attributes:
        sample: Sample to run
        fixture_name: Name of the fixture to run it with
    """

    sample: Sample
    fixture_name: str

    def label(self) -> str:
        return f"{self.fixture_name} {self.sample.path}"


def build_work_items(
    fixtures: Sequence[Fixture],
    samples: Sequence[Sample],
    rng: Optional[random.Random] = None,
) -> List[WorkItem]:
    """
    Build the shuffled work queue.

    Args:
        fixtures: Selected fixtures
        samples: Discovered samples (duplicates allowed)
        rng: Random source (seed it for a reproducible order)

    Returns:
        len(fixtures) * len(samples) work items in random order
    """
    items = [
        WorkItem(sample=sample, fixture_name=fixture.name)
        for fixture in fixtures
        for sample in samples
    ]
    (rng or random.Random()).shuffle(items)

    logger.info(
        f"[Matrix] {len(items)} item(s): {len(fixtures)} fixture(s) x {len(samples)} sample(s)"
    )
    return items
