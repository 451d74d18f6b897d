"""
Sample discovery errors.
"""


class SampleDiscoveryError(Exception):
    """Raised when a sample source cannot be resolved."""

    pass
