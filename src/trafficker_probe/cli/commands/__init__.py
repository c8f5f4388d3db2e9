"""Probe subcommands."""
