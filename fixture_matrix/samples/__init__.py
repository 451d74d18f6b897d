"""
Sample discovery.
"""

from .discovery import Sample, discover_samples, load_sample, samples_in_dir
from .errors import SampleDiscoveryError

__all__ = [
    "Sample",
    "SampleDiscoveryError",
    "discover_samples",
    "load_sample",
    "samples_in_dir",
]
