"""Artiforge CLI — Typer-based command-line interface.

Provides the ``artiforge`` command with subcommands for checksumming files,
computing repository paths, replaying recorded build sessions and
inspecting build-info records.

All output uses Rich for formatted terminal display.
"""
