"""Reconciliation of sought taxa against a curated sequence file."""

import logging
from pathlib import Path
from typing import List, Set, Union

from Bio import SeqIO

from .exceptions import MalformedCurationFile
from .session import AcquisitionSession
from .taxon_patterns import TaxonMode, get_strategy

logger = logging.getLogger(__name__)


def read_labels(path: Union[str, Path]) -> List[str]:
    """Return the FASTA labels of a curated or aligned file.

    Raises:
        MalformedCurationFile: If the file is missing, unreadable or empty
    """
    path = Path(path)
    if not path.is_file():
        raise MalformedCurationFile(f"Curated file not found: {path}")

    try:
        labels = [record.id for record in SeqIO.parse(str(path), "fasta")]
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedCurationFile(f"Cannot parse {path} as FASTA: {e}") from e

    if not labels:
        raise MalformedCurationFile(f"No sequence records in {path}")
    if any(not label for label in labels):
        raise MalformedCurationFile(f"Empty sequence label in {path}")
    return labels


def retained_taxa(path: Union[str, Path],
                  mode: TaxonMode = TaxonMode.IN_AREA) -> Set[str]:
    """Taxon identifiers of the records kept in a curated file."""
    strategy = get_strategy(mode)
    retained = set()
    for label in read_labels(path):
        identifier = strategy.retained(label)
        if identifier is None:
            logger.warning(f"No {strategy.mode.value} taxon in label '{label}', ignored")
            continue
        retained.add(identifier)
    logger.info(f"{len(retained)} taxa retained in {path}")
    return retained


def compare_taxa(sought: Set[str], retained: Set[str]) -> Set[str]:
    """Taxa that were sought but did not survive curation."""
    return set(sought) - set(retained)


def replacement_worklist(session: AcquisitionSession,
                         curated_path: Union[str, Path]) -> List[str]:
    """Sorted taxa to search again with the next rank.

    Args:
        session: Session of the round whose output was curated
        curated_path: Curated FASTA for the session's gene

    Raises:
        MalformedCurationFile: If the curated file cannot be read
    """
    retained = retained_taxa(curated_path, session.mode)
    missing = sorted(compare_taxa(session.sought, retained))
    logger.info(
        f"{session.gene}: {len(session.sought)} sought, "
        f"{len(session.sought) - len(missing)} retained, {len(missing)} to replace"
    )
    return missing
