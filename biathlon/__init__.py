"""Replay a biathlon competition from an event log and report the results."""

__version__ = "0.1.0"

__all__ = ["cli", "events", "handlers", "models", "results"]