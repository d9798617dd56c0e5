"""
Labeled sequence datasets.

A :class:`SequenceDataset` is an ordered collection of encoded sequence
pairs (observed indices, hidden indices, optional identifier) sharing one
observed and one hidden alphabet. It is the sink that both extractors
append to, and the artifact consumed by downstream model training.

File format
-----------
Datasets are stored as text, gzip-compressed when the file name ends in
``.gz``. The first line holds the alphabets separated by whitespace::

    <observed> <hidden> [<complete>]

followed by the entries. Without a complete alphabet each entry is::

    i: <id>
    o: <observed symbols>
    h: <hidden symbols>

With a complete alphabet each entry is a single ``c:`` line in which
position ``k`` holds ``complete[observed[k] + n_observed * hidden[k]]``.
The ``i:`` line is optional; entries without it get their position in
the dataset as identifier when loaded.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence, Union

import numpy as np

from .encoding import INDEX_DTYPE, decode
from .files import open_text
from .models import LabeledSequence, StateAlphabets

logger = logging.getLogger(__name__)


class DatasetError(Exception):
    """Exception for malformed datasets and dataset files."""
    pass


def _encode_line(line: str, alphabet: str) -> np.ndarray:
    """Convert a line of stored symbols into an index array."""
    indices = np.empty(len(line), dtype=INDEX_DTYPE)
    for pos, ch in enumerate(line):
        idx = alphabet.find(ch)
        if idx < 0:
            raise DatasetError(f"Symbol {ch!r} is not in alphabet {alphabet!r}")
        indices[pos] = idx
    return indices


class SequenceDataset:
    """
    Ordered collection of encoded (observed, hidden) sequence pairs.

    The alphabets are fixed when the dataset is created. Entries are only
    ever appended; every appended entry is checked against the alphabets,
    so all stored indices are valid symbol positions.

    Example:
        >>> dataset = SequenceDataset(StateAlphabets(observed="ACGT", hidden="xi"))
        >>> dataset.append([0, 1, 2], [0, 0, 1], id="gene1")
        >>> len(dataset), dataset.total_length
        (1, 3)
    """

    def __init__(self, states: StateAlphabets):
        self.states = states
        self._observed: list[np.ndarray] = []
        self._hidden: list[np.ndarray] = []
        self._ids: list[Optional[str]] = []

    # -------------------------------------------------------------------------
    # Collection interface
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[LabeledSequence]:
        for idx in range(len(self)):
            yield self[idx]

    def __getitem__(self, idx: int) -> LabeledSequence:
        return LabeledSequence(
            id=self._ids[idx],
            observed=self._observed[idx],
            hidden=self._hidden[idx],
        )

    @property
    def ids(self) -> list[Optional[str]]:
        return list(self._ids)

    @property
    def total_length(self) -> int:
        """Total number of positions across all entries."""
        return sum(len(seq) for seq in self._observed)

    def append(
        self,
        observed: Union[Sequence[int], np.ndarray],
        hidden: Union[Sequence[int], np.ndarray],
        id: Optional[str] = None,
    ) -> None:
        """
        Append an encoded pair.

        Args:
            observed: Observed state indices
            hidden: Hidden state indices
            id: Optional identifier

        Raises:
            DatasetError: If the sequences differ in length or contain
                indices outside the alphabets
        """
        observed = np.asarray(observed, dtype=INDEX_DTYPE)
        hidden = np.asarray(hidden, dtype=INDEX_DTYPE)

        if observed.shape != hidden.shape or observed.ndim != 1:
            raise DatasetError(
                f"Observed and hidden sequences must be 1-D and of equal length, "
                f"got {observed.shape} and {hidden.shape}"
            )
        if len(observed) and int(observed.max()) >= self.states.n_observed:
            raise DatasetError(
                f"Observed index {int(observed.max())} out of range for "
                f"alphabet {self.states.observed!r}"
            )
        if len(hidden) and int(hidden.max()) >= self.states.n_hidden:
            raise DatasetError(
                f"Hidden index {int(hidden.max())} out of range for "
                f"alphabet {self.states.hidden!r}"
            )

        self._observed.append(observed)
        self._hidden.append(hidden)
        self._ids.append(id)

    # -------------------------------------------------------------------------
    # Derived datasets
    # -------------------------------------------------------------------------

    def join(self, other: SequenceDataset) -> SequenceDataset:
        """
        Concatenate two datasets with identical alphabets.

        Raises:
            DatasetError: If the observed or hidden alphabets differ
        """
        if (other.states.observed != self.states.observed
                or other.states.hidden != self.states.hidden):
            raise DatasetError("Cannot join datasets with different alphabets")

        joined = SequenceDataset(self.states)
        for entry in self:
            joined.append(entry.observed, entry.hidden, id=entry.id)
        for entry in other:
            joined.append(entry.observed, entry.hidden, id=entry.id)
        return joined

    def filter(self, predicate: Callable[[LabeledSequence], bool]) -> SequenceDataset:
        """Return the subset of entries for which ``predicate`` is true."""
        filtered = SequenceDataset(self.states)
        for entry in self:
            if predicate(entry):
                filtered.append(entry.observed, entry.hidden, id=entry.id)
        return filtered

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save(self, path: Union[str, Path]) -> None:
        """
        Write the dataset to a text file (gzip-compressed for ``.gz``).

        Args:
            path: Output file path
        """
        states = self.states
        with open_text(path, "w") as f:
            f.write(states.header() + "\n")
            for entry in self:
                if entry.id is not None:
                    f.write(f"i: {entry.id}\n")
                if states.complete is None:
                    f.write(f"o: {decode(entry.observed, states.observed)}\n")
                    f.write(f"h: {decode(entry.hidden, states.hidden)}\n")
                else:
                    complete = (entry.observed.astype(np.int64)
                                + states.n_observed * entry.hidden.astype(np.int64))
                    f.write(f"c: {decode(complete, states.complete)}\n")

        logger.info(f"Saved {len(self)} sequences to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> SequenceDataset:
        """
        Read a dataset written by :meth:`save`.

        Args:
            path: Dataset file path

        Returns:
            Loaded dataset

        Raises:
            DatasetError: If the file is empty or malformed
        """
        with open_text(path, "r") as f:
            header = f.readline().split()
            if len(header) not in (2, 3):
                raise DatasetError(f"Invalid dataset header in {path}")

            try:
                states = StateAlphabets(
                    observed=header[0],
                    hidden=header[1],
                    complete=header[2] if len(header) == 3 else None,
                )
            except ValueError as e:
                raise DatasetError(f"Invalid alphabets in {path}: {e}") from e

            dataset = cls(states)
            entry_id: Optional[str] = None
            observed: Optional[np.ndarray] = None

            for line_no, line in enumerate(f, start=2):
                line = line.rstrip("\r\n")
                if not line.strip():
                    continue
                if ":" not in line:
                    raise DatasetError(f"{path}:{line_no}: expected '<key>: <value>'")

                key, value = line.split(":", 1)
                key = key.strip()
                value = value.strip()

                if key == "i":
                    entry_id = value
                elif key == "o":
                    observed = _encode_line(value, states.observed)
                elif key == "h":
                    if observed is None:
                        raise DatasetError(f"{path}:{line_no}: hidden line without observed line")
                    hidden = _encode_line(value, states.hidden)
                    dataset._append_loaded(observed, hidden, entry_id)
                    observed, entry_id = None, None
                elif key == "c":
                    if states.complete is None:
                        raise DatasetError(f"{path}:{line_no}: complete line without complete alphabet")
                    complete = _encode_line(value, states.complete)
                    dataset._append_loaded(
                        complete % states.n_observed,
                        complete // states.n_observed,
                        entry_id,
                    )
                    entry_id = None
                else:
                    raise DatasetError(f"{path}:{line_no}: unknown key {key!r}")

            if observed is not None or entry_id is not None:
                raise DatasetError(f"{path}: incomplete entry at end of file")

        logger.debug(f"Loaded {len(dataset)} sequences from {path}")
        return dataset

    def _append_loaded(self, observed: np.ndarray, hidden: np.ndarray, entry_id: Optional[str]) -> None:
        if len(observed) != len(hidden):
            raise DatasetError(
                f"Entry {len(self)}: observed and hidden lengths differ "
                f"({len(observed)} != {len(hidden)})"
            )
        self.append(observed, hidden, id=entry_id if entry_id is not None else str(len(self)))

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def summary(self) -> str:
        """Generate dataset summary."""
        n = len(self)
        total = self.total_length
        lines = [
            f"Sequences: {n}",
            f"  Observed states: {self.states.observed}",
            f"  Hidden states: {self.states.hidden}",
            f"  Total length: {total}",
            f"  Mean length: {total / n if n else 0.0:.1f}",
        ]
        if self.states.complete is not None:
            lines.append(f"  Complete states: {self.states.complete}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"SequenceDataset(n={len(self)}, observed={self.states.observed!r}, "
            f"hidden={self.states.hidden!r})"
        )
