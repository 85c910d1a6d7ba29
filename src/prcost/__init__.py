"""Cloud cost and retest analysis for Prow CI jobs triggered by GitHub pull requests."""

__version__ = "0.1.0"
