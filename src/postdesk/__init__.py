"""Postdesk: a sandboxed editing API for folder-based markdown posts."""

__version__ = "0.1.0"
