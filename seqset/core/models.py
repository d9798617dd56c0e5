"""
Core data models for seqset.

This module defines the structures shared by the extractors and the
dataset: the state alphabets of a dataset, the configuration of each
extractor, and the minimal feature/location model that the GenBank
extractor consumes. Configurations and alphabets use Pydantic for
validation; plain records use dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class StateAlphabets(BaseModel):
    """
    Observed, hidden and (optionally) complete state alphabets of a dataset.

    Each alphabet is an ordered string of distinct symbols; the index of a
    symbol in the string is its encoded value. The complete alphabet, when
    present, enumerates (observed, hidden) pairs: the complete index of a
    position is ``observed + n_observed * hidden``.

    Alphabets are written into the dataset file header separated by
    whitespace, so they may not contain whitespace themselves.
    """
    model_config = ConfigDict(frozen=True)

    observed: str = Field(..., min_length=1, description="Observed state symbols")
    hidden: str = Field(..., min_length=1, description="Hidden state symbols")
    complete: Optional[str] = Field(None, description="Complete state symbols")

    @field_validator("observed", "hidden", "complete")
    @classmethod
    def validate_symbols(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if any(ch.isspace() for ch in v):
            raise ValueError(f"Alphabet may not contain whitespace: {v!r}")
        if len(set(v)) != len(v):
            raise ValueError(f"Alphabet contains duplicate symbols: {v!r}")
        return v

    @model_validator(mode="after")
    def validate_complete_size(self) -> StateAlphabets:
        if self.complete is not None and len(self.complete) != self.n_observed * self.n_hidden:
            raise ValueError(
                f"Complete alphabet must have {self.n_observed * self.n_hidden} symbols, "
                f"got {len(self.complete)}"
            )
        return self

    @property
    def n_observed(self) -> int:
        return len(self.observed)

    @property
    def n_hidden(self) -> int:
        return len(self.hidden)

    def header(self) -> str:
        """Header line of the dataset file format."""
        parts = [self.observed, self.hidden]
        if self.complete is not None:
            parts.append(self.complete)
        return " ".join(parts)


class StructureExtractorConfig(BaseModel):
    """
    Options of the DSSP structure-record extractor.

    Attributes:
        unique_names: Register protein names so that later records with the
            same MOLECULE name are skipped
        unique_prefix: Register residue-sequence prefixes so that later
            records starting with the same residues are skipped
        prefix_length: Number of leading residues compared by the prefix check
        include_breaks: Keep chain-break positions (``!``) as unknown residues
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    unique_names: bool = True
    unique_prefix: bool = False
    prefix_length: int = Field(10, ge=0)
    include_breaks: bool = False


class AnnotationExtractorConfig(BaseModel):
    """
    Options of the GenBank annotation-record extractor.

    Attributes:
        unique_genes: Take at most one coding sequence (the first listed)
            per gene
        allow_unknown_nts: Accept genes with ambiguous nucleotides, which
            are encoded as ``N``
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    unique_genes: bool = False
    allow_unknown_nts: bool = False


@dataclass(frozen=True)
class Location:
    """
    Position of a feature on a nucleotide sequence.

    Blocks are inclusive ``(min, max)`` pairs in 1-based coordinates, as
    written in GenBank files. ``strand`` is 1 (forward), -1 (reverse) or
    None when unknown or mixed.
    """
    blocks: tuple[tuple[int, int], ...]
    strand: Optional[int] = 1

    @property
    def min(self) -> int:
        return min(start for start, _ in self.blocks)

    @property
    def max(self) -> int:
        return max(end for _, end in self.blocks)

    @property
    def coverage(self) -> int:
        """Number of positions covered by the blocks."""
        return sum(max(end - start + 1, 0) for start, end in self.blocks)

    @property
    def is_reverse(self) -> bool:
        return self.strand == -1

    def shadow(self) -> Location:
        """Smallest single contiguous location enclosing all blocks."""
        return Location(blocks=((self.min, self.max),), strand=self.strand)


@dataclass(frozen=True)
class Feature:
    """An annotated feature: type tag (``gene``, ``CDS``, ...) plus location."""
    type: str
    location: Location
    qualifiers: dict[str, Any] = field(default_factory=dict)


@dataclass
class LabeledSequence:
    """
    A single encoded entry of a dataset.

    Attributes:
        id: Identifier used for traceability (protein ID, gene index)
        observed: Observed state indices
        hidden: Hidden state indices, same length as ``observed``
    """
    id: Optional[str]
    observed: np.ndarray
    hidden: np.ndarray

    def __len__(self) -> int:
        return len(self.observed)

    @property
    def length(self) -> int:
        return len(self.observed)
