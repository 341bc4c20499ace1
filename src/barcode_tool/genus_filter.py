"""Selection of under-sampled genera for outside-area searches."""

import logging
from typing import List, Optional, Sequence

import pandas as pd

from .exceptions import ConfigurationError
from .master_table import COMBINATION_COLUMN, GENUS_COLUMN
from .models import GenusAggregate

logger = logging.getLogger(__name__)

MAX_SPECIES = 3


def _gene_columns(table: pd.DataFrame,
                  gene_columns: Optional[Sequence[str]],
                  n_genes: Optional[int]) -> List[str]:
    if gene_columns:
        missing = [c for c in gene_columns if c not in table.columns]
        if missing:
            raise ConfigurationError(f"Gene columns not in table: {', '.join(missing)}")
        return list(gene_columns)
    if n_genes is None or n_genes < 1:
        raise ConfigurationError("Specify gene columns or a positive number of genes")
    if n_genes > len(table.columns):
        raise ConfigurationError(f"Table has only {len(table.columns)} columns")
    # Joined gene columns are appended at the end of the table
    return list(table.columns[-n_genes:])


def aggregate_genera(table: pd.DataFrame,
                     gene_columns: Optional[Sequence[str]] = None,
                     n_genes: Optional[int] = None,
                     genus_column: str = GENUS_COLUMN,
                     combination_column: str = COMBINATION_COLUMN) -> List[GenusAggregate]:
    """Per-genus species count and number of present accessions."""
    columns = _gene_columns(table, gene_columns, n_genes)

    present = table[columns].notna().sum(axis=1)
    frame = pd.DataFrame({
        'genus': table[genus_column],
        'species': table[combination_column],
        'present': present,
    }).dropna(subset=['genus'])

    grouped = frame.groupby('genus', sort=True).agg(
        species_count=('species', 'nunique'),
        present_count=('present', 'sum'),
    )
    return [
        GenusAggregate(genus=str(genus), species_count=int(row.species_count),
                       present_count=int(row.present_count))
        for genus, row in grouped.iterrows()
    ]


def select_sparse_genera(table: pd.DataFrame,
                         gene_columns: Optional[Sequence[str]] = None,
                         n_genes: Optional[int] = None,
                         max_species: int = MAX_SPECIES,
                         genus_column: str = GENUS_COLUMN,
                         combination_column: str = COMBINATION_COLUMN) -> List[str]:
    """Genera with no sequence in any gene and fewer than ``max_species`` species.

    These are the candidates for searching sequences outside the study area.
    """
    aggregates = aggregate_genera(table, gene_columns, n_genes,
                                  genus_column, combination_column)
    sparse = [a.genus for a in aggregates
              if a.present_count == 0 and a.species_count < max_species]
    logger.info(f"{len(sparse)} of {len(aggregates)} genera lack sequences and have < {max_species} species")
    return sparse
