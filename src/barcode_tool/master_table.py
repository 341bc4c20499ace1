"""Loading and saving the master taxon table."""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from .exceptions import ConfigurationError
from .models import Taxon, normalize_name

logger = logging.getLogger(__name__)

COMBINATION_COLUMN = "combination"
FAMILY_COLUMN = "family"
GENUS_COLUMN = "genus"

ENCODINGS = ['utf-8', 'utf-8-sig', 'latin-1']


def load_master_table(path: Union[str, Path],
                      combination_column: str = COMBINATION_COLUMN,
                      family_column: str = FAMILY_COLUMN,
                      genus_column: str = GENUS_COLUMN) -> pd.DataFrame:
    """Read the master taxon table from CSV, TSV or Excel.

    Combination names are normalized to ``Genus_species`` and empty cells
    become missing values.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If a required column is absent
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Master table not found: {path}")

    suffix = path.suffix.lower()
    if suffix in ['.xlsx', '.xls']:
        table = pd.read_excel(path)
    else:
        sep = '\t' if suffix == '.tsv' else None
        table = _read_delimited(path, sep)

    missing = [c for c in (combination_column, family_column, genus_column)
               if c not in table.columns]
    if missing:
        raise ConfigurationError(f"Master table {path} lacks columns: {', '.join(missing)}")

    table = table.replace(r'^\s*$', np.nan, regex=True)
    table[combination_column] = table[combination_column].map(
        lambda v: normalize_name(str(v)) if pd.notna(v) else v
    )
    logger.info(f"Loaded master table with {len(table)} taxa from {path}")
    return table


def _read_delimited(path: Path, sep: Optional[str]) -> pd.DataFrame:
    last_error = None
    for encoding in ENCODINGS:
        try:
            return pd.read_csv(path, sep=sep, engine='python', encoding=encoding)
        except UnicodeDecodeError as e:
            last_error = e
    raise ConfigurationError(f"Could not decode {path}: {last_error}")


def save_master_table(table: pd.DataFrame, path: Union[str, Path]) -> Path:
    """Write the table as CSV, TSV or Excel depending on the suffix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    suffix = path.suffix.lower()
    if suffix in ['.xlsx', '.xls']:
        table.to_excel(path, index=False)
    else:
        table.to_csv(path, sep='\t' if suffix == '.tsv' else ',', index=False)
    logger.info(f"Wrote master table ({len(table)} rows) to {path}")
    return path


def taxa_from_table(table: pd.DataFrame,
                    genera: Optional[Iterable[str]] = None,
                    combination_column: str = COMBINATION_COLUMN,
                    family_column: str = FAMILY_COLUMN,
                    genus_column: str = GENUS_COLUMN) -> List[Taxon]:
    """Taxa of the table, optionally restricted to some genera."""
    rows = table
    if genera is not None:
        rows = table[table[genus_column].isin(set(genera))]

    taxa = []
    seen = set()
    for _, row in rows.iterrows():
        name = row[combination_column]
        if pd.isna(name) or name in seen:
            continue
        seen.add(name)
        family = row[family_column] if pd.notna(row[family_column]) else None
        taxa.append(Taxon.from_name(name, family=family))
    return taxa
