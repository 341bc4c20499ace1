"""Acquisition rounds: search, fetch, parse, write and track sought taxa."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .comparator import replacement_worklist
from .entrez_client import EntrezClient
from .exceptions import ConfigurationError, NoResultsError, PerItemSkip
from .fasta_writer import LabelConfig, write_fasta
from .genus_filter import select_sparse_genera
from .layout import ResultsLayout
from .logging_config import LogTimer, RoundProgress, get_logger
from .master_table import COMBINATION_COLUMN, GENUS_COLUMN
from .models import SequenceRecord, SkippedItem, Taxon
from .record_parser import parse_record
from .session import AcquisitionSession
from .taxon_patterns import TaxonMode
from .term_builder import LengthRangeLike, make_search_term

logger = get_logger('acquisition')

TaxonLike = Union[str, Taxon]


@dataclass
class AcquisitionResult:
    """Outcome of one acquisition round."""
    gene: str
    session: AcquisitionSession
    records: List[SequenceRecord] = field(default_factory=list)
    skipped: List[SkippedItem] = field(default_factory=list)
    identifiers: Dict[str, str] = field(default_factory=dict)
    fasta_path: Optional[Path] = None
    rank: int = 1

    @property
    def fetched_taxa(self) -> List[str]:
        return [r.organism for r in self.records]


def _taxon_name(taxon: TaxonLike) -> str:
    return taxon.identifier if isinstance(taxon, Taxon) else str(taxon)


def acquire(taxa: Iterable[TaxonLike],
            gene: Optional[str],
            client: EntrezClient,
            *,
            mode: TaxonMode = TaxonMode.IN_AREA,
            replacement: bool = False,
            rank: Optional[int] = None,
            length_range: LengthRangeLike = None,
            max_results: int = EntrezClient.DEFAULT_MAX_RESULTS,
            session: Optional[AcquisitionSession] = None,
            layout: Optional[ResultsLayout] = None,
            labels: Optional[LabelConfig] = None,
            write: bool = True) -> AcquisitionResult:
    """Run one acquisition round for a gene.

    Args:
        taxa: Taxa to search, as names or Taxon objects
        gene: Gene region (required)
        client: Rate-limited Entrez client
        mode: In-area or outside-area round
        replacement: Round re-searches taxa rejected during curation; the
            session's sought set is kept and output is appended
        rank: Which match to take per taxon; defaults to 1, or to the
            session's rank + 1 for replacement rounds
        length_range: Optional inclusive sequence length bounds
        max_results: Cap on identifiers requested per search
        session: Session of the previous round (required for replacements)
        layout: Results layout used to place the FASTA file
        labels: Label configuration for the FASTA file
        write: Write a FASTA file when a layout is given

    Returns:
        AcquisitionResult carrying the records and the updated session

    Raises:
        ConfigurationError: Missing gene, labels or session
        NoResultsError: No identifier or no record resolved for any taxon
    """
    if not gene or not gene.strip():
        raise ConfigurationError("Gene region is required for an acquisition round")
    gene = gene.strip()

    if replacement:
        if session is None:
            raise ConfigurationError("A replacement round needs the session it replaces")
        if session.gene != gene:
            raise ConfigurationError(
                f"Session belongs to {session.gene}, not {gene}"
            )
        mode = session.mode
    mode = TaxonMode(mode)

    if rank is None:
        rank = session.rank + 1 if replacement else 1

    if labels is None:
        labels = LabelConfig.for_outside() if mode is TaxonMode.OUTSIDE else LabelConfig()
    if write and layout is not None:
        labels.validate()

    # Build every term before the first remote call
    terms: List[Tuple[str, str]] = []
    seen = set()
    for taxon in taxa:
        term = make_search_term(_taxon_name(taxon), gene, length_range)
        if term.taxon in seen:
            continue
        seen.add(term.taxon)
        terms.append((term.taxon, term.to_query()))
    if not terms:
        raise ConfigurationError(f"No taxa given for {gene}")

    identifiers: Dict[str, str] = {}

    with LogTimer(f"{gene} acquisition round ({len(terms)} taxa, rank {rank})", logger):
        searching = RoundProgress(logger, gene, "search", len(terms))
        for name, term in terms:
            try:
                uid = client.search(term, rank=rank, max_results=max_results)
            except PerItemSkip as e:
                searching.skip(SkippedItem(name, "search", str(e)))
                continue

            if uid is None:
                searching.skip(SkippedItem(name, "search", f"fewer than {rank} matches"))
            else:
                identifiers[name] = uid
                searching.ok(name, uid)
        searching.complete()

        if not identifiers:
            raise NoResultsError(
                f"No {gene} identifiers found for any of {len(terms)} taxa (rank {rank})"
            )

        records: List[SequenceRecord] = []
        fetching = RoundProgress(logger, gene, "fetch", len(identifiers))
        for name, uid in identifiers.items():
            try:
                records.append(parse_record(client.fetch(uid)))
            except PerItemSkip as e:
                fetching.skip(SkippedItem(name, e.stage or "fetch", str(e), {'uid': uid}))
                continue
            fetching.ok(name, uid)
        fetching.complete()

    skipped = searching.skipped + fetching.skipped
    if not records:
        raise NoResultsError(f"None of {len(identifiers)} {gene} records could be fetched")

    fasta_path = None
    if write and layout is not None:
        append = replacement or mode is TaxonMode.OUTSIDE
        fasta_path = write_fasta(records, gene, layout.sequences(gene), labels, append=append)

    if replacement:
        session.record_round(records, preserve=True, rank=rank)
    else:
        session = AcquisitionSession(gene=gene, mode=mode)
        session.record_round(records, rank=rank)

    logger.info(
        f"{gene}: {len(records)} records acquired, {len(skipped)} taxa skipped"
    )
    return AcquisitionResult(
        gene=gene,
        session=session,
        records=records,
        skipped=skipped,
        identifiers=identifiers,
        fasta_path=fasta_path,
        rank=rank,
    )


def run_replacement_round(session: AcquisitionSession,
                          client: EntrezClient,
                          layout: Optional[ResultsLayout] = None,
                          curated_path: Optional[Union[str, Path]] = None,
                          **kwargs) -> AcquisitionResult:
    """Re-search the taxa that did not survive curation, one rank deeper.

    The curated file defaults to the layout's curated path for the gene.
    An empty worklist returns an empty result without remote calls.
    """
    if curated_path is None:
        if layout is None:
            raise ConfigurationError("Curated file path or results layout is required")
        curated_path = layout.curated(session.gene)

    worklist = replacement_worklist(session, curated_path)
    if not worklist:
        logger.info(f"{session.gene}: every sought taxon was retained, nothing to replace")
        return AcquisitionResult(gene=session.gene, session=session, rank=session.rank)

    return acquire(worklist, session.gene, client, replacement=True,
                   session=session, layout=layout, **kwargs)


def run_outside_round(table: pd.DataFrame,
                      gene: str,
                      client: EntrezClient,
                      gene_columns: Optional[Sequence[str]] = None,
                      n_genes: Optional[int] = None,
                      layout: Optional[ResultsLayout] = None,
                      genus_column: str = GENUS_COLUMN,
                      combination_column: str = COMBINATION_COLUMN,
                      **kwargs) -> AcquisitionResult:
    """Search sequences for sparse genera outside the study area."""
    genera = select_sparse_genera(table, gene_columns=gene_columns, n_genes=n_genes,
                                  genus_column=genus_column,
                                  combination_column=combination_column)
    if not genera:
        raise NoResultsError("No sparse genera to search outside the study area")
    taxa = [Taxon(genus, outside=True) for genus in genera]
    return acquire(taxa, gene, client, mode=TaxonMode.OUTSIDE, layout=layout, **kwargs)
