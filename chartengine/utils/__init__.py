"""Utility modules: logging, timing and evaluation tracing."""
