"""Command line interface for bibexport.

Built with Click and Rich; reads items as JSON and writes BibTeX or
BibLaTeX records.
"""

from bibexport.cli.main import cli

__all__ = ["cli"]
