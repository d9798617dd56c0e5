"""
seqset: labeled sequence datasets from DSSP and GenBank records.

This package converts two kinds of biological records into datasets for
training hidden-state sequence models such as secondary-structure or
gene-structure predictors. Each dataset entry is an aligned pair of
encoded sequences:

- DSSP files give one entry per protein: amino acids (observed) and
  DSSP secondary structure codes (hidden).
- GenBank files give one entry per coding sequence: genomic nucleotides
  between the first and last coding nucleotide (observed) and
  exon/intron labels for the same positions (hidden).

Key components:
    - core: State alphabets, encoding, and the SequenceDataset container
    - extractors: DSSP and GenBank record extractors
    - cli: Command-line interface

Basic usage:
    >>> from seqset import StructureRecordExtractor
    >>>
    >>> extractor = StructureRecordExtractor()
    >>> extractor.read("1lyz.dssp")
    >>> extractor.dataset.save("proteins.gz")
"""

__version__ = "0.1.0"

from .core.dataset import DatasetError, SequenceDataset
from .core.encoding import EncodingError, SequenceEncoder, decode, symbol_index
from .core.models import (
    AnnotationExtractorConfig,
    Feature,
    LabeledSequence,
    Location,
    StateAlphabets,
    StructureExtractorConfig,
)
from .extractors.dssp import StructureRecordExtractor, UniquenessRegistry
from .extractors.genbank import (
    AnnotationRecordExtractor,
    BiopythonFeatureParser,
    GenbankFormatError,
)

__all__ = [
    # Version
    "__version__",
    # Dataset
    "SequenceDataset",
    "DatasetError",
    "LabeledSequence",
    "StateAlphabets",
    # Encoding
    "SequenceEncoder",
    "EncodingError",
    "decode",
    "symbol_index",
    # Configuration
    "StructureExtractorConfig",
    "AnnotationExtractorConfig",
    # Extractors
    "StructureRecordExtractor",
    "UniquenessRegistry",
    "AnnotationRecordExtractor",
    "BiopythonFeatureParser",
    "GenbankFormatError",
    "Feature",
    "Location",
]
