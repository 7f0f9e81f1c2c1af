"""
Generic utility functions shared across modules.

Includes time/clock abstractions, the filesystem helper used by the loader
and writer, and logging setup for the command-line entrypoints.
"""
