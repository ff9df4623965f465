"""Commit and ref policy checks for pull requests and pushes."""

__version__ = "0.1.0"
