"""Shared helpers for monthly time-series handling."""
