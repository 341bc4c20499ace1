"""Joining accessions from finalized alignments onto the master table."""

import logging
import re
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from .comparator import read_labels
from .exceptions import ConfigurationError
from .master_table import COMBINATION_COLUMN
from .taxon_patterns import retained_in_area

logger = logging.getLogger(__name__)

# Accession codes lead the label and carry digits, e.g. "KX123456_Alismataceae_..."
ACCESSION_PATTERN = re.compile(r"^(?=[A-Za-z]*\d)[A-Za-z0-9]{4,}(?![A-Za-z0-9])")


def label_accession(label: str) -> Optional[str]:
    """Leading accession-like token of a label, if the label has one."""
    match = ACCESSION_PATTERN.match(label)
    return match.group(0) if match else None


def alignment_accessions(alignment_path: Union[str, Path], gene: str) -> pd.DataFrame:
    """Accession and combination name for each record of an alignment.

    Returns:
        DataFrame with columns ``combination`` and ``gene``, one row per
        distinct combination (first record wins)
    """
    rows = []
    for label in read_labels(alignment_path):
        combination = retained_in_area(label)
        if combination is None:
            logger.warning(f"No combination name in label '{label}', skipped")
            continue
        rows.append({
            COMBINATION_COLUMN: combination,
            gene: label_accession(label),
        })

    frame = pd.DataFrame(rows, columns=[COMBINATION_COLUMN, gene])
    return frame.drop_duplicates(subset=COMBINATION_COLUMN, keep='first')


def join_accessions(table: pd.DataFrame,
                    gene: Optional[str],
                    alignment_path: Union[str, Path],
                    combination_column: str = COMBINATION_COLUMN) -> pd.DataFrame:
    """Left-join one gene's accessions onto the master table.

    Args:
        table: Master taxon table
        gene: Gene region, used as the new column name
        alignment_path: Finalized alignment for the gene
        combination_column: Join key column of the table

    Returns:
        New table with an added (or replaced) ``gene`` column

    Raises:
        ConfigurationError: If the gene region is missing
        MalformedCurationFile: If the alignment cannot be read
    """
    if not gene or not gene.strip():
        raise ConfigurationError("Gene region is required to join accessions")
    gene = gene.strip()

    accessions = alignment_accessions(alignment_path, gene)
    accessions = accessions.rename(columns={COMBINATION_COLUMN: combination_column})

    base = table.drop(columns=[gene]) if gene in table.columns else table
    joined = base.merge(accessions, on=combination_column, how='left')

    matched = joined[gene].notna().sum()
    logger.info(f"Joined {matched} {gene} accessions onto {len(joined)} taxa")
    return joined
