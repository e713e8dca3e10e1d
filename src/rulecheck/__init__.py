"""rulecheck: diagnostic assertions for phase-based validation pipelines."""

__version__ = "0.3.0"
