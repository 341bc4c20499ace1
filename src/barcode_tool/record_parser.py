"""Conversion of Entrez GBSeq records into SequenceRecord objects."""

import logging
from typing import Any, Mapping

from .exceptions import PerItemSkip
from .models import SequenceRecord, normalize_name

logger = logging.getLogger(__name__)


def _field(raw: Mapping[str, Any], key: str) -> str:
    value = raw.get(key)
    return str(value).strip() if value is not None else ""


def parse_record(raw: Any) -> SequenceRecord:
    """Build a SequenceRecord from one GBSeq dictionary.

    Args:
        raw: Parsed efetch response for a single record

    Returns:
        Normalized sequence record

    Raises:
        PerItemSkip: If the response lacks an organism or sequence
    """
    if not isinstance(raw, Mapping):
        raise PerItemSkip(f"Unexpected record type: {type(raw).__name__}",
                          stage="parse")

    accession = _field(raw, "GBSeq_locus") or _field(raw, "GBSeq_primary-accession")
    organism = normalize_name(_field(raw, "GBSeq_organism"))
    sequence = _field(raw, "GBSeq_sequence")

    if not organism:
        raise PerItemSkip(f"Record {accession or '?'} has no organism",
                          item=accession, stage="parse")
    if not sequence:
        raise PerItemSkip(f"Record {accession or '?'} has no sequence",
                          item=accession, stage="parse")

    try:
        length = int(_field(raw, "GBSeq_length"))
    except ValueError:
        length = len(sequence)

    record = SequenceRecord(
        accession=accession,
        organism=organism,
        taxonomy=_field(raw, "GBSeq_taxonomy"),
        sequence=sequence,
        length=length,
    )
    logger.debug(f"Parsed {record.accession}: {record.organism} ({record.length} bp)")
    return record
