"""
Command-line interface for seqset.

Usage patterns:
    seqset dssp proteins.gz dssp/*.dssp
    seqset genbank out/ --unique genbank/*.gb.gz
    seqset info proteins.gz
"""

from .main import cli, main

__all__ = ["cli", "main"]
