"""Core configuration and logging for TaskSync."""
