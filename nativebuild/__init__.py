"""nativebuild — build matrix orchestrator for per-platform native Node modules."""

__version__ = "0.1.0"
