"""Imagesmith CLI — Typer-based command-line interface.

Provides the ``imagesmith`` command with subcommands to run the agent loop,
run a single poll, show recorded builds and check the configuration.

All output uses Rich for formatted terminal display.
"""
