"""
Unit tests for seqset alphabet encoding.

The encoder treats the two sides of a sequence pair asymmetrically:
unknown observed symbols are tolerated (sentinel index or rejection of
the entry), unknown hidden symbols abort the run.
"""

import numpy as np
import pytest

from seqset.core.dataset import SequenceDataset
from seqset.core.encoding import (
    AMINO_ACIDS,
    DISULFIDE_CYSTEINE,
    SECONDARY_STRUCTURES,
    UNKNOWN_SYMBOL,
    EncodingError,
    SequenceEncoder,
    decode,
    gene_complete_states,
    symbol_index,
)
from seqset.core.models import StateAlphabets


@pytest.fixture
def protein_encoder():
    return SequenceEncoder(
        observed_symbols=AMINO_ACIDS,
        hidden_symbols=SECONDARY_STRUCTURES,
        lowercase_symbol=DISULFIDE_CYSTEINE,
    )


class TestSymbolIndex:
    """Tests for single-symbol lookup."""

    def test_known_symbol(self):
        assert symbol_index("A", AMINO_ACIDS) == 0
        assert symbol_index("Y", AMINO_ACIDS) == 19

    def test_unknown_symbol_default(self):
        assert symbol_index("X", AMINO_ACIDS) is None
        assert symbol_index("X", AMINO_ACIDS, default=20) == 20

    def test_blank_structure_code(self):
        """The blank DSSP code is the first structure state."""
        assert symbol_index(" ", SECONDARY_STRUCTURES) == 0

    def test_empty_symbol(self):
        assert symbol_index("", AMINO_ACIDS, default=-1) == -1


class TestSequenceEncoder:
    """Tests for encoding raw observed/hidden strings."""

    def test_basic_pair(self, protein_encoder):
        observed, hidden = protein_encoder.encode("ACD", " HG")

        assert observed.tolist() == [0, 1, 2]
        assert hidden.tolist() == [0, 2, 1]

    def test_lengths_always_match(self, protein_encoder):
        observed, hidden = protein_encoder.encode("AC!DE!", "HHH EE")
        assert len(observed) == len(hidden)

    def test_lowercase_is_cysteine(self, protein_encoder):
        """Every lower-case residue letter is a disulfide-bonded cysteine."""
        observed, _ = protein_encoder.encode("abcz", "    ")

        assert observed.tolist() == [1, 1, 1, 1]

    def test_lowercase_uppercased_by_default(self):
        encoder = SequenceEncoder(observed_symbols="ACGT", hidden_symbols="xi")

        assert encoder.encode_observed("acgt").tolist() == [0, 1, 2, 3]
        assert encoder.observed_index("g") == encoder.observed_index("G")

    def test_unknown_observed_uses_sentinel(self, protein_encoder):
        observed, _ = protein_encoder.encode("AXB", "   ")

        assert observed.tolist() == [0, 20, 20]
        assert protein_encoder.sentinel == len(AMINO_ACIDS)

    def test_unknown_hidden_raises(self, protein_encoder):
        with pytest.raises(EncodingError, match="Unknown hidden state"):
            protein_encoder.encode("ACD", " Q ")

    def test_breaks_removed(self, protein_encoder):
        """Break positions are dropped from both sequences, not filled."""
        raw = "AC!D!E"
        observed, hidden = protein_encoder.encode(raw, "HH GHE")

        assert len(observed) == len(raw) - raw.count("!")
        assert observed.tolist() == [0, 1, 2, 3]
        assert hidden.tolist() == [2, 2, 1, 4]

    def test_breaks_kept_as_unknown(self):
        encoder = SequenceEncoder(
            observed_symbols=AMINO_ACIDS,
            hidden_symbols=SECONDARY_STRUCTURES,
            include_breaks=True,
        )
        observed, hidden = encoder.encode("A!C", "H E")

        assert observed.tolist() == [0, 20, 1]
        assert hidden.tolist() == [2, 0, 4]

    def test_reject_unknown(self):
        encoder = SequenceEncoder(
            observed_symbols="ACGT",
            hidden_symbols="xi",
            include_breaks=True,
            reject_unknown=True,
        )
        assert encoder.encode_observed("acgt").tolist() == [0, 1, 2, 3]
        assert encoder.encode_observed("acnt") is None
        assert encoder.encode("acnt", "xxxx") is None

    def test_length_mismatch(self, protein_encoder):
        with pytest.raises(ValueError, match="differ in length"):
            protein_encoder.encode("ACD", "HH")

    def test_empty_pair(self, protein_encoder):
        observed, hidden = protein_encoder.encode("", "")
        assert len(observed) == 0
        assert len(hidden) == 0

    def test_encode_and_append(self, protein_encoder):
        dataset = SequenceDataset(StateAlphabets(observed=AMINO_ACIDS + "?", hidden="-GHIEBTS"))

        assert protein_encoder.encode_and_append(dataset, "ACD", " HG", id="1LYZ")
        assert len(dataset) == 1
        assert dataset[0].id == "1LYZ"
        assert dataset[0].observed.tolist() == [0, 1, 2]


class TestDecode:
    """Tests for index-to-symbol decoding."""

    def test_round_trip(self, protein_encoder):
        """Decoding recovers the normalized symbols; unknowns become '?'."""
        raw = "MKabAXW"
        observed, hidden = protein_encoder.encode(raw, "HHHEE  ")

        assert decode(observed, AMINO_ACIDS + UNKNOWN_SYMBOL) == "MKCCA?W"
        assert decode(hidden, SECONDARY_STRUCTURES) == "HHHEE  "

    def test_decode_numpy(self):
        assert decode(np.array([3, 2, 1, 0]), "ACGT") == "TGCA"

    def test_gene_complete_states(self):
        assert gene_complete_states("ACGT") == "ACGTacgt"
        assert gene_complete_states("ACGTN") == "ACGTNacgtn"
