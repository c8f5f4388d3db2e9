"""Shared helpers for the probes."""
