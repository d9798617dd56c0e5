"""
Alphabet encoding utilities for seqset.

Both extractors turn raw symbol strings into arrays of small non-negative
integers, one per position, where each integer is the index of the
symbol in a fixed alphabet. The two sides of a sequence pair are treated
differently when a symbol is missing from its alphabet:

- observed symbols (amino acids, nucleotides) are frequently ambiguous in
  real data, so an unknown observed symbol either maps to a sentinel
  index equal to the alphabet length or causes the entry to be rejected;
- hidden symbols (secondary structure codes) come from a closed set, so
  an unknown hidden symbol means the input is not in the expected format
  and raises :class:`EncodingError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

if TYPE_CHECKING:
    from .dataset import SequenceDataset

logger = logging.getLogger(__name__)


# The 20 standard amino acids, in DSSP/one-letter alphabetical order
AMINO_ACIDS = "ACDEFGHIKLMNPQRSTVWY"

# DSSP secondary structure codes; blank means no assigned structure
SECONDARY_STRUCTURES = " GHIEBTS"

# Stored form of the structure alphabet (blank is not allowed in file headers)
SECONDARY_STRUCTURE_STATES = SECONDARY_STRUCTURES.replace(" ", "-")

# Symbol stored for amino acids outside AMINO_ACIDS
UNKNOWN_SYMBOL = "?"

# DSSP marker for a chain break
BREAK_MARKER = "!"

# DSSP marks disulfide-bonded cysteines with lower-case bridge labels a..z
DISULFIDE_CYSTEINE = "C"

NUCLEOTIDES = "ACGT"
AMBIGUOUS_NUCLEOTIDE = "N"

# Hidden states of gene datasets
EXON = 0
INTRON = 1
GENE_STATES = "xi"

INDEX_DTYPE = np.uint8


class EncodingError(Exception):
    """Raised when a hidden-state symbol is not part of the hidden alphabet."""
    pass


def symbol_index(symbol: str, alphabet: str, default: Optional[int] = None) -> Optional[int]:
    """
    Index of a symbol in an alphabet.

    Args:
        symbol: Single character to look up
        alphabet: Ordered alphabet string
        default: Value returned when the symbol is absent

    Returns:
        Index of the symbol, or ``default`` if it is not in the alphabet
    """
    idx = alphabet.find(symbol) if symbol else -1
    return idx if idx >= 0 else default


def decode(indices: Sequence[int], alphabet: str) -> str:
    """
    Convert encoded indices back to symbols.

    Args:
        indices: Encoded state indices
        alphabet: Alphabet the indices refer to

    Returns:
        String of alphabet symbols

    Raises:
        IndexError: If an index is outside the alphabet
    """
    return "".join(alphabet[int(i)] for i in indices)


def gene_complete_states(observed: str) -> str:
    """Complete alphabet of a gene dataset: exon nucleotides upper case, intron lower case."""
    return observed.upper() + observed.lower()


@dataclass(frozen=True)
class SequenceEncoder:
    """
    Encodes raw observed/hidden strings against fixed lookup alphabets.

    Attributes:
        observed_symbols: Alphabet used to look up observed symbols
        hidden_symbols: Alphabet used to look up hidden symbols
        include_breaks: Keep positions whose observed symbol is the break
            marker; otherwise they are dropped from both sequences
        reject_unknown: Reject the whole entry when an observed symbol is
            not in the alphabet instead of using the sentinel index
        lowercase_symbol: Symbol looked up for every lower-case observed
            character; None looks up the character's upper-case form
    """
    observed_symbols: str
    hidden_symbols: str
    include_breaks: bool = False
    reject_unknown: bool = False
    lowercase_symbol: Optional[str] = None

    @property
    def sentinel(self) -> int:
        """Index assigned to unknown observed symbols."""
        return len(self.observed_symbols)

    def observed_index(self, symbol: str) -> Optional[int]:
        """
        Encode one observed symbol.

        Lower-case letters are looked up as ``lowercase_symbol`` when it is
        set (DSSP bridge labels all denote cysteine), otherwise in their
        upper-case form (nucleotide sequences are stored in lower case).
        """
        if symbol.islower():
            symbol = self.lowercase_symbol or symbol.upper()
        default = None if self.reject_unknown else self.sentinel
        return symbol_index(symbol, self.observed_symbols, default)

    def hidden_index(self, symbol: str) -> int:
        idx = symbol_index(symbol, self.hidden_symbols)
        if idx is None:
            raise EncodingError(
                f"Unknown hidden state {symbol!r}; expected one of {self.hidden_symbols!r}"
            )
        return idx

    def kept_positions(self, observed_raw: str) -> list[int]:
        """Positions that survive break filtering."""
        if self.include_breaks:
            return list(range(len(observed_raw)))
        return [i for i, ch in enumerate(observed_raw) if ch != BREAK_MARKER]

    def encode_observed(self, observed_raw: str) -> Optional[np.ndarray]:
        """
        Encode an observed string, applying break filtering.

        Returns:
            Index array, or None if ``reject_unknown`` is set and a symbol
            is missing from the alphabet
        """
        positions = self.kept_positions(observed_raw)
        observed = np.empty(len(positions), dtype=INDEX_DTYPE)
        for out_pos, pos in enumerate(positions):
            idx = self.observed_index(observed_raw[pos])
            if idx is None:
                return None
            observed[out_pos] = idx
        return observed

    def encode(
        self,
        observed_raw: str,
        hidden_raw: str,
    ) -> Optional[tuple[np.ndarray, np.ndarray]]:
        """
        Encode a pair of parallel raw strings.

        Args:
            observed_raw: Observed symbols (e.g. residue letters)
            hidden_raw: Hidden symbols, same length as ``observed_raw``

        Returns:
            ``(observed, hidden)`` index arrays of equal length, or None if
            the observed side was rejected

        Raises:
            EncodingError: If a hidden symbol is not in the hidden alphabet
            ValueError: If the raw strings differ in length
        """
        if len(observed_raw) != len(hidden_raw):
            raise ValueError(
                f"Observed and hidden strings differ in length: "
                f"{len(observed_raw)} != {len(hidden_raw)}"
            )

        observed = self.encode_observed(observed_raw)
        if observed is None:
            return None

        positions = self.kept_positions(observed_raw)
        hidden = np.empty(len(positions), dtype=INDEX_DTYPE)
        for out_pos, pos in enumerate(positions):
            hidden[out_pos] = self.hidden_index(hidden_raw[pos])

        return observed, hidden

    def encode_and_append(
        self,
        dataset: SequenceDataset,
        observed_raw: str,
        hidden_raw: str,
        id: Optional[str] = None,
    ) -> bool:
        """
        Encode a raw pair and append it to a dataset.

        Returns:
            True if an entry was appended, False if it was rejected
        """
        encoded = self.encode(observed_raw, hidden_raw)
        if encoded is None:
            logger.debug(f"Rejected entry {id}: unknown observed symbol")
            return False

        dataset.append(*encoded, id=id)
        return True
