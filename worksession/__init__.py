"""WorkSession: alternating work/rest countdown timer."""

__version__ = "0.1.0"
