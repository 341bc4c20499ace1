"""FASTA output for acquired barcode sequences."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from .exceptions import ConfigurationError
from .models import SequenceRecord, normalize_name
from .taxon_patterns import COMPOSITE_MARKER, OUTSIDE_MARKER

logger = logging.getLogger(__name__)


@dataclass
class LabelConfig:
    """Which fields make up a FASTA label.

    Fields are always emitted in the order accession, family,
    combination (or genus), composite marker, outside marker.
    ``combination`` takes precedence over ``genus`` when both are set.
    """
    accession: bool = True
    family: bool = True
    combination: bool = True
    genus: bool = False
    composite: bool = False
    outside: bool = False

    def validate(self) -> None:
        if not (self.accession or self.family or self.combination or self.genus):
            raise ConfigurationError(
                "Label needs at least one of accession, family, combination or genus"
            )

    def builders(self) -> List[Tuple[str, Callable[[SequenceRecord], Optional[str]]]]:
        """Ordered (name, extractor) pairs for the enabled fields."""
        self.validate()
        steps = []
        if self.accession:
            steps.append(("accession", lambda r: r.accession))
        if self.family:
            steps.append(("family", lambda r: r.family))
        if self.combination:
            steps.append(("combination", lambda r: r.combination))
        elif self.genus:
            steps.append(("genus", lambda r: r.genus))
        if self.composite:
            steps.append(("composite", lambda r: COMPOSITE_MARKER))
        if self.outside:
            steps.append(("outside", lambda r: OUTSIDE_MARKER))
        return steps

    @classmethod
    def for_outside(cls) -> 'LabelConfig':
        return cls(outside=True)


def build_label(record: SequenceRecord, labels: Optional[LabelConfig] = None) -> str:
    """Assemble the underscore-joined label for one record.

    Fields that are empty for this record (e.g. no family in the lineage)
    are left out.
    """
    labels = labels or LabelConfig()
    parts = []
    for name, extract in labels.builders():
        value = extract(record)
        if value:
            parts.append(value)
        else:
            logger.debug(f"No {name} for {record.accession}, omitted from label")
    return "_".join(parts)


def write_fasta(records: Sequence[SequenceRecord],
                gene: str,
                path: Union[str, Path],
                labels: Optional[LabelConfig] = None,
                append: bool = False) -> Path:
    """Write records as two-line FASTA to a gene-scoped file.

    Args:
        records: Non-empty ordered records to write
        gene: Gene region the file belongs to
        path: Output file path
        labels: Label field selection
        append: Extend an existing file instead of overwriting it

    Returns:
        Path of the written file

    Raises:
        ConfigurationError: If gene, records or label fields are missing
    """
    if not gene or not gene.strip():
        raise ConfigurationError("Gene region is required to write sequences")
    if not records:
        raise ConfigurationError(f"No sequence records to write for {gene}")
    labels = labels or LabelConfig()
    labels.validate()

    seq_records = []
    for record in records:
        if not record.organism or record.organism != normalize_name(record.organism):
            raise ConfigurationError(
                f"Record {record.accession} needs an underscored organism name, got {record.organism!r}"
            )
        label = build_label(record, labels)
        seq_records.append(SeqRecord(Seq(record.sequence), id=label, description=""))

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = 'a' if append else 'w'
    with open(path, mode) as f:
        count = SeqIO.write(seq_records, f, "fasta-2line")

    logger.info(f"{'Appended' if append else 'Wrote'} {count} {gene} sequences to {path}")
    return path
