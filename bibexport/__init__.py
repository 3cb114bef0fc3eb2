"""Bibliography record exporter for BibTeX and BibLaTeX."""

__version__ = "0.1.0"
