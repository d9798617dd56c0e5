"""
Core data structures for seqset.

Modules:
    models: Pydantic configurations and alphabets, location/feature records
    encoding: Alphabets of the supported record types and symbol encoding
    dataset: SequenceDataset container and its text file format
    files: Gzip-aware file access
"""

from .dataset import DatasetError, SequenceDataset
from .encoding import (
    AMINO_ACIDS,
    BREAK_MARKER,
    EXON,
    INTRON,
    NUCLEOTIDES,
    SECONDARY_STRUCTURES,
    EncodingError,
    SequenceEncoder,
    decode,
    symbol_index,
)
from .models import (
    AnnotationExtractorConfig,
    Feature,
    LabeledSequence,
    Location,
    StateAlphabets,
    StructureExtractorConfig,
)

__all__ = [
    # Dataset
    "SequenceDataset",
    "DatasetError",
    # Encoding
    "SequenceEncoder",
    "EncodingError",
    "decode",
    "symbol_index",
    "AMINO_ACIDS",
    "SECONDARY_STRUCTURES",
    "NUCLEOTIDES",
    "BREAK_MARKER",
    "EXON",
    "INTRON",
    # Models
    "StateAlphabets",
    "StructureExtractorConfig",
    "AnnotationExtractorConfig",
    "Location",
    "Feature",
    "LabeledSequence",
]
