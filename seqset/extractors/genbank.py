"""
GenBank annotation-record extractor.

Each coding sequence (CDS) of a GenBank record becomes one dataset entry:
the observed sequence is the stretch of genomic DNA between the first and
the last nucleotide of the CDS, and the hidden sequence marks every
position of that stretch as exon (``x``) or intron (``i``).

Full-featured GenBank parsers are slow on records with long nucleotide
sequences, so the file is split before parsing: only the annotation part
(everything up to the ``ORIGIN`` line) goes through the feature parser,
while the sequence part is collected with a plain character filter.
"""

from __future__ import annotations

import logging
import re
from io import StringIO
from pathlib import Path
from typing import Iterable, Optional, Protocol, Union

import numpy as np
from Bio import SeqIO
from Bio.Seq import Seq

from ..core.dataset import SequenceDataset
from ..core.encoding import (
    AMBIGUOUS_NUCLEOTIDE,
    EXON,
    GENE_STATES,
    INDEX_DTYPE,
    INTRON,
    NUCLEOTIDES,
    SequenceEncoder,
    gene_complete_states,
)
from ..core.files import open_text
from ..core.models import (
    AnnotationExtractorConfig,
    Feature,
    Location,
    StateAlphabets,
)

logger = logging.getLogger(__name__)


ORIGIN_MARKER = "ORIGIN"
RECORD_TERMINATOR = "//"

# IUPAC nucleotide codes accepted in the sequence section
IUPAC_NUCLEOTIDES = frozenset("acgtrykmswbdhvn")

_NON_SEQUENCE_CHARS = re.compile(r"[^a-z]+")

# Number of genes between progress messages
PROGRESS_INTERVAL = 50


class GenbankFormatError(Exception):
    """Raised when a GenBank file does not have the expected structure."""
    pass


class FeatureParser(Protocol):
    """Parses the annotation part of a GenBank record into features."""

    def parse(self, text: str) -> list[Feature]:
        ...


class BiopythonFeatureParser:
    """Feature parser backed by Biopython's GenBank reader."""

    def parse(self, text: str) -> list[Feature]:
        """
        Parse a GenBank record without its sequence.

        Args:
            text: Record text up to the ``ORIGIN`` line, terminated by ``//``

        Returns:
            Features in file order

        Raises:
            GenbankFormatError: If the text holds no GenBank record
        """
        try:
            record = SeqIO.read(StringIO(text), "genbank")
        except ValueError as e:
            raise GenbankFormatError(f"Failed to parse GenBank record: {e}") from e

        logger.debug(f"Record name: {record.name}")
        logger.debug(f"Record description: {record.description}")

        features = []
        for feat in record.features:
            if feat.location is None:
                logger.warning(f"Skipping {feat.type} feature without location")
                continue
            features.append(Feature(
                type=feat.type,
                location=self._convert_location(feat.location),
                qualifiers=dict(feat.qualifiers),
            ))
        return features

    @staticmethod
    def _convert_location(location) -> Location:
        """Convert a Biopython location (0-based, end-exclusive) to 1-based blocks."""
        blocks = tuple(
            (int(part.start) + 1, int(part.end))
            for part in location.parts
        )
        return Location(blocks=blocks, strand=location.strand)


def split_genbank(lines: Iterable[str]) -> tuple[str, str]:
    """
    Split a GenBank record into its annotation and sequence parts.

    Args:
        lines: Lines of the record

    Returns:
        ``(attributes, sequence)``: the record text up to and including the
        ``ORIGIN`` line followed by ``//``, and the lower-case nucleotide
        sequence with all other characters removed

    Raises:
        GenbankFormatError: If there is no ``ORIGIN`` line
    """
    attributes: list[str] = []
    sequence: list[str] = []
    reading_attributes = True

    for line in lines:
        if reading_attributes:
            attributes.append(line.rstrip("\r\n") + "\n")
            if line.startswith(ORIGIN_MARKER):
                attributes.append(RECORD_TERMINATOR + "\n")
                reading_attributes = False
        else:
            sequence.append(_NON_SEQUENCE_CHARS.sub("", line))

    if reading_attributes:
        raise GenbankFormatError("No nucleotide sequence (ORIGIN section) found")

    return "".join(attributes), "".join(sequence)


def project_exons(location: Location) -> np.ndarray:
    """
    Exon/intron labels for the window spanned by a location.

    Every position between the location's minimum and maximum is labeled
    as intron, then the positions covered by each block as exon. Labels of
    reverse-strand locations are reversed so that they read in the
    direction of transcription.

    Args:
        location: Possibly spliced CDS location

    Returns:
        Array of ``EXON``/``INTRON`` values; empty if the location covers
        no positions

    Example:
        >>> project_exons(Location(blocks=((2, 4), (7, 9)), strand=1)).tolist()
        [0, 0, 0, 1, 1, 0, 0, 0]
    """
    if location.coverage == 0:
        return np.empty(0, dtype=INDEX_DTYPE)

    offset = location.min
    labels = np.full(location.max - offset + 1, INTRON, dtype=INDEX_DTYPE)
    for start, end in location.blocks:
        labels[start - offset:end - offset + 1] = EXON

    if location.is_reverse:
        labels = labels[::-1].copy()
    return labels


def gene_states(allow_unknown_nts: bool) -> StateAlphabets:
    """Alphabets of a gene dataset."""
    observed = NUCLEOTIDES + AMBIGUOUS_NUCLEOTIDE if allow_unknown_nts else NUCLEOTIDES
    return StateAlphabets(
        observed=observed,
        hidden=GENE_STATES,
        complete=gene_complete_states(observed),
    )


class AnnotationRecordExtractor:
    """
    Builds an exon/intron dataset from GenBank files.

    Example:
        >>> extractor = AnnotationRecordExtractor(
        ...     AnnotationExtractorConfig(unique_genes=True)
        ... )
        >>> extractor.read("chromosome1.gb.gz")
        >>> extractor.dataset.save("chromosome1.gz")
    """

    def __init__(
        self,
        config: Optional[AnnotationExtractorConfig] = None,
        parser: Optional[FeatureParser] = None,
        dataset: Optional[SequenceDataset] = None,
    ):
        """
        Initialize the extractor.

        Args:
            config: Extraction options (defaults if None)
            parser: Annotation parser (Biopython-backed if None)
            dataset: Dataset to append to; a new one is created if None

        Raises:
            ValueError: If ``dataset`` uses different alphabets
        """
        self.config = config or AnnotationExtractorConfig()
        self.parser = parser or BiopythonFeatureParser()

        states = gene_states(self.config.allow_unknown_nts)
        if dataset is None:
            dataset = SequenceDataset(states)
        elif (dataset.states.observed != states.observed
                or dataset.states.hidden != states.hidden):
            raise ValueError("Dataset alphabets do not match gene states")
        self.dataset = dataset

        self.encoder = SequenceEncoder(
            observed_symbols=states.observed,
            hidden_symbols=states.hidden,
            include_breaks=True,
            reject_unknown=True,
        )
        self.source_sequence: Optional[Seq] = None

    def read(self, path: Union[str, Path]) -> int:
        """
        Read a GenBank file and append one entry per processed CDS.

        Args:
            path: GenBank file (may be gzip-compressed)

        Returns:
            Number of entries appended

        Raises:
            GenbankFormatError: If the file has no sequence section or the
                sequence contains illegal symbols
            OSError: If the file cannot be read
        """
        logger.debug(f"Reading GenBank file {path}")
        with open_text(path) as f:
            attributes, sequence = split_genbank(f)

        illegal = set(sequence) - IUPAC_NUCLEOTIDES
        if illegal:
            raise GenbankFormatError(
                f"Illegal symbols in nucleotide sequence: {sorted(illegal)}"
            )
        self.source_sequence = Seq(sequence)
        logger.debug(f"Read nucleotide sequence of length {len(sequence)}")

        features = self.parser.parse(attributes)
        return self.process_features(features)

    def process_features(self, features: Iterable[Feature]) -> int:
        """
        Walk features in order, pairing CDS features with the preceding gene.

        Args:
            features: Parsed features of the current record

        Returns:
            Number of entries appended
        """
        if self.source_sequence is None:
            raise GenbankFormatError("No source sequence loaded")

        gene_index = 0
        cds_found = True
        added = 0

        for feature in features:
            if feature.type == "gene":
                gene_index += 1
                cds_found = False
                if gene_index % PROGRESS_INTERVAL == 0:
                    logger.debug(f"Processed {gene_index} genes")
            elif feature.type == "CDS":
                if self.config.unique_genes and cds_found:
                    continue
                if self._add_gene(feature.location, str(gene_index)):
                    added += 1
                cds_found = True

        logger.info(f"Total genes: {gene_index}, sequences added: {added}")
        return added

    def observed_sequence(self, location: Location) -> Optional[np.ndarray]:
        """
        Encoded nucleotides of the shadow of a location.

        Returns:
            Index array, or None if a nucleotide is outside the observed
            alphabet
        """
        if location.coverage == 0:
            return np.empty(0, dtype=INDEX_DTYPE)

        shadow = location.shadow()
        if shadow.max > len(self.source_sequence):
            raise GenbankFormatError(
                f"Location {shadow.min}..{shadow.max} exceeds sequence length "
                f"{len(self.source_sequence)}"
            )
        nucleotides = str(self.source_sequence[shadow.min - 1:shadow.max])
        return self.encoder.encode_observed(nucleotides)

    def _add_gene(self, location: Location, gene_id: str) -> bool:
        hidden = project_exons(location)
        observed = self.observed_sequence(location)

        if observed is None:
            logger.debug(f"Skipping gene {gene_id}: unknown nucleotide")
            return False

        self.dataset.append(observed, hidden, id=gene_id)
        return True
