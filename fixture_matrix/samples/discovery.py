"""
Sample discovery.

Resolves CLI sources into the flat list of samples the matrix runs over.

Resolution rules:
- No sources: default sample directory (public set on restricted CI runs)
- One source that is a directory: every *.json file inside it
- Otherwise: each source is an explicit sample file

Duplicates are NOT removed. Each occurrence becomes its own work item.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from ..settings import MAX_SAMPLE_BYTES, SAMPLE_PATTERN, MatrixSettings
from .errors import SampleDiscoveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    """
    An input data file, captured at discovery time.

    Attributes:
        path: Absolute path to the sample
        size: Size in bytes when discovered
    """

    path: Path
    size: int

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def too_large(self) -> bool:
        """Oversized samples are skipped, never generated from."""
        return self.size > MAX_SAMPLE_BYTES


def load_sample(path: Path) -> Sample:
    """
    Stat a sample path and build a Sample.

    Raises:
        SampleDiscoveryError: If the path does not exist or is not a file
    """
    absolute = Path(path).resolve()
    if not absolute.exists():
        raise SampleDiscoveryError(f"Sample not found: {path}")
    if not absolute.is_file():
        raise SampleDiscoveryError(f"Sample is not a file: {path}")
    return Sample(path=absolute, size=absolute.stat().st_size)


def samples_in_dir(directory: Path, pattern: str = SAMPLE_PATTERN) -> List[Sample]:
    """
    List samples matching pattern directly inside directory.

    Sorted by name so discovery itself is deterministic; the matrix
    shuffles afterwards.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise SampleDiscoveryError(f"Sample directory not found: {directory}")

    samples = [load_sample(p) for p in sorted(directory.glob(pattern)) if p.is_file()]
    logger.debug(f"[Discovery] {len(samples)} sample(s) in {directory}")
    return samples


def discover_samples(sources: Sequence[str], settings: MatrixSettings) -> List[Sample]:
    """
    Resolve sources into samples.

    Args:
        sources: Positional CLI arguments (may be empty)
        settings: Run settings (default directory selection)

    Returns:
        List of samples, duplicates preserved

    Raises:
        SampleDiscoveryError: If a source cannot be resolved
    """
    if not sources:
        directory = settings.default_sample_dir()
        logger.info(f"[Discovery] Using default sample directory {directory}")
        return samples_in_dir(directory)

    if len(sources) == 1 and Path(sources[0]).is_dir():
        return samples_in_dir(Path(sources[0]))

    return [load_sample(Path(source)) for source in sources]
