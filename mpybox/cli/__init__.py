"""Command-line interface for mpybox."""

from mpybox.cli.app import app, main


__all__ = ["app", "main"]
