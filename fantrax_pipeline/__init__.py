"""Fantasy baseball league pipeline: reconciliation and daily scoring core."""

__version__ = "0.1.0"
