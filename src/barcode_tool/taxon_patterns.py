"""Taxon identifier extraction rules for in-area and outside-area rounds.

Two places need a taxon identifier from a name-like string:

* the session, which derives the *sought* identifier from a fetched
  record's organism name;
* the comparator, which derives the *retained* identifier from a FASTA
  label that survived clustering, alignment and manual tree inspection.

Each mode pairs one rule for each side so that a record written with the
default label layout yields the same identifier on both.
"""

import re
from dataclasses import dataclass
from enum import Enum
from itertools import dropwhile
from typing import Callable, Dict, List, Optional

from .models import FAMILY_PATTERN, combination_name


class TaxonMode(Enum):
    """Whether a round targets the study area or fills sparse genera."""
    IN_AREA = "in_area"
    OUTSIDE = "outside"


COMPOSITE_MARKER = "composite"
OUTSIDE_MARKER = "outside"

_MARKER_SUFFIX = re.compile(rf"(?:_(?:{COMPOSITE_MARKER}|{OUTSIDE_MARKER}))+$")
_GENUS_TOKEN = re.compile(r"[A-Z][a-z-]+")


def _taxon_tokens(label: str) -> List[str]:
    """Label tokens from the genus on.

    The genus follows the family token when there is one; otherwise it is
    the first capitalized all-letter token, which skips the accession.
    """
    tokens = [t for t in _MARKER_SUFFIX.sub("", label).split("_") if t]
    for i, token in enumerate(tokens):
        if FAMILY_PATTERN.fullmatch(token):
            rest = tokens[i + 1:]
            break
    else:
        rest = list(dropwhile(lambda t: not _GENUS_TOKEN.fullmatch(t), tokens))
    if not rest or not _GENUS_TOKEN.fullmatch(rest[0]):
        return []
    return rest


def sought_in_area(organism: str) -> str:
    return combination_name(organism)


def sought_outside(organism: str) -> str:
    return organism.split("_")[0]


def retained_in_area(label: str) -> Optional[str]:
    """``Genus_species`` (or bare genus) carried by the label."""
    tokens = _taxon_tokens(label)
    return combination_name("_".join(tokens)) if tokens else None


def retained_outside(label: str) -> Optional[str]:
    """Genus carried by the label."""
    tokens = _taxon_tokens(label)
    return tokens[0] if tokens else None


@dataclass(frozen=True)
class ExtractionStrategy:
    mode: TaxonMode
    sought: Callable[[str], str]
    retained: Callable[[str], Optional[str]]


STRATEGIES: Dict[TaxonMode, ExtractionStrategy] = {
    TaxonMode.IN_AREA: ExtractionStrategy(TaxonMode.IN_AREA, sought_in_area, retained_in_area),
    TaxonMode.OUTSIDE: ExtractionStrategy(TaxonMode.OUTSIDE, sought_outside, retained_outside),
}


def get_strategy(mode: TaxonMode) -> ExtractionStrategy:
    return STRATEGIES[TaxonMode(mode)]
