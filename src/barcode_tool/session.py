"""Sought-taxon tracking between acquisition and curation rounds."""

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Set

from .models import SequenceRecord
from .taxon_patterns import TaxonMode, get_strategy

logger = logging.getLogger(__name__)


@dataclass
class AcquisitionSession:
    """Taxa targeted by the most recent non-replacement round of one gene.

    The session is returned by every acquisition round and handed to the
    comparator explicitly. Replacement rounds keep ``sought`` as it was and
    only advance ``rank``.
    """
    gene: str
    mode: TaxonMode = TaxonMode.IN_AREA
    sought: Set[str] = field(default_factory=set)
    rank: int = 1
    rounds: int = 0
    updated: float = field(default_factory=time.time)

    def __post_init__(self):
        self.mode = TaxonMode(self.mode)
        self.sought = set(self.sought)

    def identifier_for(self, organism: str) -> str:
        """Sought identifier of an organism name under this session's mode."""
        return get_strategy(self.mode).sought(organism)

    def record_round(self, records: Iterable[SequenceRecord],
                     preserve: bool = False, rank: Optional[int] = None) -> None:
        """Register a completed round.

        Args:
            records: Records successfully fetched and parsed in the round
            preserve: Keep the current sought set (replacement rounds)
            rank: Rank used by the round
        """
        if not preserve:
            self.sought = {self.identifier_for(r.organism) for r in records}
            logger.info(f"Tracking {len(self.sought)} sought taxa for {self.gene} ({self.mode.value})")
        else:
            logger.debug(f"Sought set for {self.gene} preserved ({len(self.sought)} taxa)")
        if rank is not None:
            self.rank = rank
        self.rounds += 1
        self.updated = time.time()

    def to_file(self, filepath: Path):
        """Save session to file."""
        data = {
            'gene': self.gene,
            'mode': self.mode.value,
            'sought': sorted(self.sought),
            'rank': self.rank,
            'rounds': self.rounds,
            'updated': self.updated,
            'updated_readable': datetime.fromtimestamp(self.updated).isoformat(),
        }
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2)

    @classmethod
    def from_file(cls, filepath: Path) -> 'AcquisitionSession':
        """Load session from file."""
        with open(filepath, 'r') as f:
            data = json.load(f)

        data.pop('updated_readable', None)
        data['mode'] = TaxonMode(data.get('mode', TaxonMode.IN_AREA.value))
        data['sought'] = set(data.get('sought', []))
        return cls(**data)
