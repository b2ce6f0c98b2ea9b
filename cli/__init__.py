"""CLI package for the token response pipeline

This package provides a command-line interface for running token endpoint
responses through the pipeline and managing the file-backed token cache.
"""

from cli.main import main

__all__ = [
    "main",
]
