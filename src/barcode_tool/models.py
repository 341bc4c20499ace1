"""Data models for the barcode acquisition tool."""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple

# Plant family names carry the -aceae suffix
FAMILY_PATTERN = re.compile(r"\b([A-Z][a-z]+aceae)\b")

# Qualifiers such as "_sp." or "_cf." appended to some organism names
TRAILING_QUALIFIER = re.compile(r"_[a-z]+\.$")


def normalize_name(name: str) -> str:
    """Replace whitespace runs with underscores."""
    return re.sub(r"\s+", "_", name.strip())


def combination_name(name: str) -> str:
    """Genus and species epithet of an underscored name.

    A trailing qualifier is dropped first, so ``Carex_sp.`` gives ``Carex``
    and ``Nymphaea_alba_var._rubra`` gives ``Nymphaea_alba``.
    """
    return "_".join(TRAILING_QUALIFIER.sub("", name).split("_")[:2])


def extract_family(taxonomy: str) -> Optional[str]:
    """Return the last family-level token in a taxonomy lineage."""
    matches = FAMILY_PATTERN.findall(taxonomy or "")
    return matches[-1] if matches else None


@dataclass(frozen=True)
class Taxon:
    """A species or genus-level entry of the study's reference table."""

    identifier: str
    family: Optional[str] = None
    outside: bool = False

    @classmethod
    def from_name(cls, name: str, family: Optional[str] = None,
                  outside: bool = False) -> 'Taxon':
        return cls(normalize_name(name), family, outside)

    @property
    def genus(self) -> str:
        return self.identifier.split("_")[0]

    @property
    def is_composite(self) -> bool:
        """True for genus-level entries without a species epithet."""
        return "_" not in self.identifier

    def __str__(self) -> str:
        return self.identifier


@dataclass(frozen=True)
class LengthRange:
    """Inclusive sequence length bounds."""

    minimum: int
    maximum: int

    def __str__(self) -> str:
        return f"{self.minimum}:{self.maximum}"

    def as_tuple(self) -> Tuple[int, int]:
        return (self.minimum, self.maximum)


@dataclass(frozen=True)
class SearchTerm:
    """One remote query: gene region, taxon and optional length bounds."""

    gene: str
    taxon: str
    length_range: Optional[LengthRange] = None

    def to_query(self) -> str:
        """Serialize to Entrez query syntax."""
        parts = [f"{self.gene}[GENE]", f"{self.taxon}[PORG]"]
        if self.length_range is not None:
            parts.append(f"{self.length_range}[SLEN]")
        return " AND ".join(parts)

    def __str__(self) -> str:
        return self.to_query()


@dataclass(frozen=True)
class SequenceRecord:
    """A normalized nucleotide record parsed from one fetch response."""

    accession: str
    organism: str
    taxonomy: str
    sequence: str
    length: int

    @property
    def genus(self) -> str:
        return self.organism.split("_")[0]

    @property
    def combination(self) -> str:
        """Genus and species epithet, without infraspecific qualifiers."""
        return combination_name(self.organism)

    @property
    def family(self) -> Optional[str]:
        return extract_family(self.taxonomy)


@dataclass
class GenusAggregate:
    """Per-genus sequence presence summary across gene columns."""

    genus: str
    species_count: int = 0
    present_count: int = 0


@dataclass
class SkippedItem:
    """A taxon dropped from a round by a per-item failure."""

    taxon: str
    stage: str
    reason: str
    details: dict = field(default_factory=dict)
