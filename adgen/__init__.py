"""AI ad generation worker: prompt composition and multi-provider media dispatch."""

__version__ = "0.1.0"
