"""enva — Python virtual environment validator.

This package inspects a virtual environment, enumerates its installed
packages, checks them against version and vulnerability sources, and
reports a single 0–100 health score with a tri-state verdict.
"""

__version__ = "0.1.0"
