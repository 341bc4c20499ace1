"""Results directory convention.

Per-gene artifacts are partitioned by stage and gene region::

    results/
        sequences/atpB/atpB_sequences.fasta    written by fetch rounds
        clusters/atpB/atpB_clusters.fasta      external clustering output
        alignments/atpB/atpB_alignments.fasta  external MSA output
        curated/atpB/atpB_curated.fasta        after manual tree inspection
        final/atpB/atpB_final.fasta            finalized alignment
        trees/atpB/atpB_trees.tre              external tree output
        sessions/atpB/atpB_in_area_session.json
"""

from pathlib import Path
from typing import Dict, Union

from .exceptions import ConfigurationError
from .taxon_patterns import TaxonMode

STAGE_EXTENSIONS: Dict[str, str] = {
    "sequences": "fasta",
    "clusters": "fasta",
    "alignments": "fasta",
    "curated": "fasta",
    "final": "fasta",
    "trees": "tre",
}


class ResultsLayout:
    """Resolves stage and gene scoped paths under a results root."""

    def __init__(self, root: Union[str, Path] = "results"):
        self.root = Path(root)

    def stage_path(self, stage: str, gene: str) -> Path:
        if not gene:
            raise ConfigurationError("Gene region is required to resolve result paths")
        if stage not in STAGE_EXTENSIONS:
            raise ConfigurationError(
                f"Unknown stage '{stage}', expected one of {sorted(STAGE_EXTENSIONS)}"
            )
        return self.root / stage / gene / f"{gene}_{stage}.{STAGE_EXTENSIONS[stage]}"

    def sequences(self, gene: str) -> Path:
        return self.stage_path("sequences", gene)

    def curated(self, gene: str) -> Path:
        return self.stage_path("curated", gene)

    def final(self, gene: str) -> Path:
        return self.stage_path("final", gene)

    def session(self, gene: str, mode: TaxonMode = TaxonMode.IN_AREA) -> Path:
        if not gene:
            raise ConfigurationError("Gene region is required to resolve result paths")
        mode = TaxonMode(mode)
        return self.root / "sessions" / gene / f"{gene}_{mode.value}_session.json"
