"""BaZi (Four Pillars) natal chart engine."""

__version__ = "0.1.0"
