"""
fixture-matrix: cross-product test matrix for code generator fixtures.

Runs every fixture against every JSON sample in a bounded worker pool,
each item in its own sandbox, and reports pass / tolerated / skip / fail.
"""

__version__ = "0.1.0"
