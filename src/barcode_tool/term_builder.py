"""Entrez search term construction."""

import re
from typing import Optional, Tuple, Union

from .exceptions import ConfigurationError
from .models import LengthRange, SearchTerm, normalize_name

LENGTH_RANGE_PATTERN = re.compile(r"^\s*(\d+)\s*:\s*(\d+)\s*$")

LengthRangeLike = Union[str, Tuple[int, int], LengthRange, None]


def parse_length_range(value: LengthRangeLike) -> Optional[LengthRange]:
    """Coerce a ``"MIN:MAX"`` string or pair into a LengthRange.

    Raises:
        ConfigurationError: If the value is malformed or inverted
    """
    if value is None or value == "":
        return None
    if isinstance(value, LengthRange):
        bounds = value.as_tuple()
    elif isinstance(value, str):
        match = LENGTH_RANGE_PATTERN.match(value)
        if not match:
            raise ConfigurationError(
                f"Invalid length range '{value}', expected MIN:MAX"
            )
        bounds = (int(match.group(1)), int(match.group(2)))
    else:
        try:
            low, high = value
            bounds = (int(low), int(high))
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid length range: {value!r}")

    if bounds[0] > bounds[1]:
        raise ConfigurationError(
            f"Length range minimum {bounds[0]} exceeds maximum {bounds[1]}"
        )
    return LengthRange(*bounds)


def make_search_term(taxon: str, gene: Optional[str],
                     length_range: LengthRangeLike = None) -> SearchTerm:
    """Build a SearchTerm, validating the gene region and length bounds."""
    if not gene or not gene.strip():
        raise ConfigurationError("Gene region is required to build a search term")
    if not taxon or not taxon.strip():
        raise ConfigurationError("Taxon is required to build a search term")

    return SearchTerm(
        gene=gene.strip(),
        taxon=normalize_name(taxon),
        length_range=parse_length_range(length_range),
    )


def build_search_term(taxon: str, gene: Optional[str],
                      length_range: LengthRangeLike = None) -> str:
    """Return the Entrez query string for one taxon and gene region.

    Example:
        >>> build_search_term("Hydrocleys_martii", "atpB", "500:5000")
        'atpB[GENE] AND Hydrocleys_martii[PORG] AND 500:5000[SLEN]'
    """
    return make_search_term(taxon, gene, length_range).to_query()
