"""
Record extractors.

Each extractor reads one input file per call and appends the resulting
entries to its dataset:

- dssp: StructureRecordExtractor, one protein per DSSP file
- genbank: AnnotationRecordExtractor, one entry per coding sequence
"""

from .dssp import StructureRecordExtractor, UniquenessRegistry, parse_residue_line
from .genbank import (
    AnnotationRecordExtractor,
    BiopythonFeatureParser,
    FeatureParser,
    GenbankFormatError,
    project_exons,
    split_genbank,
)

__all__ = [
    "StructureRecordExtractor",
    "UniquenessRegistry",
    "parse_residue_line",
    "AnnotationRecordExtractor",
    "BiopythonFeatureParser",
    "FeatureParser",
    "GenbankFormatError",
    "project_exons",
    "split_genbank",
]
