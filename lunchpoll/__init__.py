"""Lunch poll — phase-gated quorum voting for picking a restaurant."""

__version__ = "0.1.0"
