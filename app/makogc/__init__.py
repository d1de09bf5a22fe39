"""makogc - space reclamation and capacity rollup for mako storage nodes."""

__version__ = "0.1.0"
