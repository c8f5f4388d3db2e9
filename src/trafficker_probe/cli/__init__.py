"""Command line entry point for the probes."""
