"""
DSSP structure-record extractor.

A DSSP file describes the secondary structure of one protein. Its header
lines all end with a period; the first line that does not is the column
caption of the residue table, and every following line describes one
residue in fixed columns::

    columns 1-13   residue number, PDB number, chain (word characters/blanks)
    column  14     one-letter amino acid code ('!' marks a chain break,
                   lower-case letters mark disulfide-bonded cysteines)
    columns 15-16  blank
    column  17     secondary structure code (one of " GHIEBTS")

The extractor turns each file into one (amino acids, structures) pair and
appends it to a shared dataset, optionally skipping proteins whose name
or leading residues were already seen.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from ..core.dataset import SequenceDataset
from ..core.encoding import (
    AMINO_ACIDS,
    DISULFIDE_CYSTEINE,
    SECONDARY_STRUCTURE_STATES,
    SECONDARY_STRUCTURES,
    UNKNOWN_SYMBOL,
    SequenceEncoder,
)
from ..core.files import open_text
from ..core.models import StateAlphabets, StructureExtractorConfig

logger = logging.getLogger(__name__)


# Last word on the HEADER line is the PDB identifier
ID_PATTERN = re.compile(r"^HEADER\b.*?(\w+)\s*\.?\s*$")

NAME_PATTERN = re.compile(r"MOLECULE:(.*)$")

# Column layout of a residue line (0-based slices)
RESIDUE_FIELDS = slice(0, 13)
RESIDUE_COLUMN = 13
STRUCTURE_COLUMN = 16

_RESIDUE_FIELDS_PATTERN = re.compile(r"[\w\s]{13}")

STRUCTURE_STATES = StateAlphabets(
    observed=AMINO_ACIDS + UNKNOWN_SYMBOL,
    hidden=SECONDARY_STRUCTURE_STATES,
)


def parse_residue_line(line: str) -> Optional[tuple[str, str]]:
    """
    Extract the residue letter and structure code from a residue line.

    Args:
        line: Line from the residue table, without the line terminator

    Returns:
        ``(residue, structure)`` pair, or None if the line does not follow
        the residue column layout
    """
    if len(line) <= STRUCTURE_COLUMN:
        return None
    if not _RESIDUE_FIELDS_PATTERN.fullmatch(line[RESIDUE_FIELDS]):
        return None
    return line[RESIDUE_COLUMN], line[STRUCTURE_COLUMN]


def parse_identifier(line: str) -> Optional[str]:
    """PDB identifier from a ``HEADER`` line, or None for other lines."""
    match = ID_PATTERN.match(line)
    return match.group(1) if match else None


def parse_molecule_name(line: str) -> Optional[str]:
    """Molecule name from a ``MOLECULE:`` line with trailing punctuation removed."""
    match = NAME_PATTERN.search(line)
    if not match:
        return None
    name = match.group(1).strip().rstrip(" \t.;")
    return name or None


@dataclass
class UniquenessRegistry:
    """
    Names and sequence prefixes of the proteins seen by an extractor.

    A registry lives as long as the extractor that owns it; pass the same
    registry to several extractors to share deduplication between them.
    """
    names: set[str] = field(default_factory=set)
    prefixes: set[str] = field(default_factory=set)

    def reset(self) -> None:
        """Forget all registered names and prefixes."""
        self.names.clear()
        self.prefixes.clear()


class StructureRecordExtractor:
    """
    Builds a secondary-structure dataset from DSSP files.

    Observed states are the 20 standard amino acids plus ``?`` for any
    other residue; hidden states are the DSSP structure codes, with the
    blank code stored as ``-``. Lower-case residue letters (disulfide
    bridge labels) are stored as cysteine.

    Example:
        >>> extractor = StructureRecordExtractor()
        >>> for path in dssp_files:
        ...     extractor.read(path)
        >>> extractor.dataset.save("proteins.gz")
    """

    def __init__(
        self,
        config: Optional[StructureExtractorConfig] = None,
        dataset: Optional[SequenceDataset] = None,
        registry: Optional[UniquenessRegistry] = None,
    ):
        """
        Initialize the extractor.

        Args:
            config: Extraction options (defaults if None)
            dataset: Dataset to append to; a new one is created if None
            registry: Name/prefix registry; a new empty one if None

        Raises:
            ValueError: If ``dataset`` uses different alphabets
        """
        self.config = config or StructureExtractorConfig()
        self.registry = registry if registry is not None else UniquenessRegistry()

        if dataset is None:
            dataset = SequenceDataset(STRUCTURE_STATES)
        elif (dataset.states.observed != STRUCTURE_STATES.observed
                or dataset.states.hidden != STRUCTURE_STATES.hidden):
            raise ValueError("Dataset alphabets do not match DSSP states")
        self.dataset = dataset

        self.encoder = SequenceEncoder(
            observed_symbols=AMINO_ACIDS,
            hidden_symbols=SECONDARY_STRUCTURES,
            include_breaks=self.config.include_breaks,
            lowercase_symbol=DISULFIDE_CYSTEINE,
        )

    def read(self, path: Union[str, Path]) -> int:
        """
        Read one DSSP file and append its protein to the dataset.

        The protein is skipped if its molecule name or residue prefix is
        already registered.

        Args:
            path: DSSP file (may be gzip-compressed)

        Returns:
            Number of entries appended (0 or 1)

        Raises:
            EncodingError: If the file contains an unknown structure code
            OSError: If the file cannot be read
        """
        logger.debug(f"Reading DSSP file {path}")

        protein_id: Optional[str] = None
        in_header = True
        residues: list[str] = []
        structures: list[str] = []

        with open_text(path) as f:
            for line in f:
                line = line.rstrip("\r\n")

                parsed_id = parse_identifier(line)
                if parsed_id is not None:
                    protein_id = parsed_id

                name = parse_molecule_name(line)
                if name is not None:
                    if name in self.registry.names:
                        logger.debug(f"Skipping {path}: duplicate name {name!r}")
                        return 0
                    if self.config.unique_names:
                        self.registry.names.add(name)

                if not line.endswith("."):
                    in_header = False
                if in_header:
                    continue

                parsed = parse_residue_line(line)
                if parsed is not None:
                    residues.append(parsed[0])
                    structures.append(parsed[1])

        amino_acids = "".join(residues)
        prefix = amino_acids[:self.config.prefix_length]
        if prefix in self.registry.prefixes:
            logger.debug(f"Skipping {path}: duplicate prefix {prefix!r}")
            return 0
        if self.config.unique_prefix:
            self.registry.prefixes.add(prefix)

        self.encoder.encode_and_append(
            self.dataset, amino_acids, "".join(structures), id=protein_id
        )
        logger.debug(f"Added protein {protein_id} ({len(amino_acids)} residues)")
        return 1
