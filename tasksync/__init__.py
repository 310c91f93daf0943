"""TaskSync: multi-user task tracking with realtime task synchronization."""

__version__ = "1.0.0"
