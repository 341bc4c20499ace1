"""Command-line interface for the barcode acquisition tool."""

import functools
import sys
from pathlib import Path

import click

from .accession_joiner import join_accessions
from .acquisition import acquire, run_outside_round, run_replacement_round
from .cli_utils import echo, echo_list, secho, set_quiet_mode
from .comparator import replacement_worklist
from .config import Config, get_default_config_path, create_example_config
from .entrez_client import EntrezClient
from .exceptions import BarcodeToolError
from .genus_filter import select_sparse_genera
from .layout import ResultsLayout
from .logging_config import setup_logging
from .master_table import load_master_table, save_master_table
from .session import AcquisitionSession
from .taxon_input import TaxonListParser
from .taxon_patterns import TaxonMode
from .term_builder import build_search_term


def fatal_errors(func):
    """Report tool errors as ``ERROR:`` lines and exit with status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (BarcodeToolError, FileNotFoundError) as e:
            secho(f"ERROR: {e}", err=True, fg="red")
            sys.exit(1)
    return wrapper


def make_client(cfg: Config) -> EntrezClient:
    """Build the Entrez client from validated configuration."""
    cfg.validate()
    return EntrezClient(
        email=cfg.api.email,
        api_key=cfg.api.ncbi_api_key,
        database=cfg.api.database,
        min_interval=cfg.api.min_interval_seconds,
        retry_attempts=cfg.api.retry_attempts,
    )


def _mode(outside: bool) -> TaxonMode:
    return TaxonMode.OUTSIDE if outside else TaxonMode.IN_AREA


def _load_session(layout: ResultsLayout, gene: str, mode: TaxonMode) -> AcquisitionSession:
    path = layout.session(gene, mode)
    if not path.exists():
        raise FileNotFoundError(
            f"No {mode.value} session for {gene} at {path}; run 'fetch' first"
        )
    return AcquisitionSession.from_file(path)


def _report(result, layout: ResultsLayout) -> None:
    session_path = layout.session(result.gene, result.session.mode)
    result.session.to_file(session_path)

    echo(f"Acquired {len(result.records)} {result.gene} records (rank {result.rank})")
    if result.fasta_path:
        echo(f"Sequences written to: {result.fasta_path}")
    if result.skipped:
        echo(f"Skipped {len(result.skipped)} taxa:")
        for item in result.skipped:
            echo(f"  {item.taxon} [{item.stage}] {item.reason}")
    echo(f"Session saved to: {session_path}")


@click.group()
@click.option('--config', 'config_file', type=click.Path(exists=True), help='Configuration file path')
@click.option('--api-key', envvar='NCBI_API_KEY', help='NCBI API key')
@click.option('--email', envvar='EMAIL', help='Email for NCBI')
@click.option('--results-dir', type=click.Path(), help='Root of the results tree')
@click.option('--log-dir', default='.barcode_logs', show_default=True, help='Directory for log files')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress all output except errors')
@click.pass_context
def cli(ctx, config_file, api_key, email, results_dir, log_dir, verbose, quiet):
    """DNA barcode acquisition and curation rounds against NCBI nucleotide.

    Examples:
        barcode-harvest term Hydrocleys_martii -g atpB -l 500:5000
        barcode-harvest fetch taxa.txt -g atpB
        barcode-harvest replace -g atpB
        barcode-harvest outside joined.csv -g atpB --n-genes 2
    """
    if quiet and verbose:
        click.echo("Error: Cannot use both --quiet and --verbose", err=True)
        sys.exit(1)

    set_quiet_mode(quiet)
    setup_logging(level='DEBUG' if verbose else 'INFO', log_dir=log_dir, quiet=quiet)

    config_path = Path(config_file) if config_file else get_default_config_path()
    try:
        cfg = Config.from_file(config_path)
        cfg.merge_env_vars()
    except BarcodeToolError as e:
        echo(f"ERROR: {e}", err=True)
        sys.exit(1)
    cfg.merge_cli_args(api_key=api_key, email=email, results_dir=results_dir)

    ctx.obj = {
        'config': cfg,
        'layout': ResultsLayout(cfg.output.results_dir),
    }


@cli.command()
@click.argument('taxon')
@click.option('--gene', '-g', help='Gene region, e.g. atpB')
@click.option('--length-range', '-l', help='Inclusive sequence length range MIN:MAX')
@click.pass_obj
@fatal_errors
def term(obj, taxon, gene, length_range):
    """Print the Entrez search term for TAXON."""
    cfg = obj['config']
    click.echo(build_search_term(taxon, gene, length_range or cfg.search.length_range))


@cli.command()
@click.argument('taxa_file', type=click.Path(exists=True))
@click.option('--gene', '-g', required=True, help='Gene region, e.g. atpB')
@click.option('--length-range', '-l', help='Inclusive sequence length range MIN:MAX')
@click.option('--rank', type=int, help='Which match to take per taxon (default: 1)')
@click.option('--max-results', type=int, help='Maximum identifiers requested per search')
@click.option('--outside', is_flag=True, help='Outside-area round: taxa are genera, output is appended')
@click.option('--no-fasta', is_flag=True, help='Do not write a FASTA file')
@click.pass_obj
@fatal_errors
def fetch(obj, taxa_file, gene, length_range, rank, max_results, outside, no_fasta):
    """Search and fetch GENE sequences for the taxa listed in TAXA_FILE."""
    cfg = obj['config']
    layout = obj['layout']
    cfg.merge_cli_args(length_range=length_range, max_results=max_results, no_fasta=no_fasta)

    parser = TaxonListParser()
    taxa = parser.parse_file(taxa_file)
    echo(f"Read {len(taxa)} taxa from {taxa_file}")

    client = make_client(cfg)
    result = acquire(
        taxa, gene, client,
        mode=_mode(outside),
        rank=rank or cfg.search.rank,
        length_range=cfg.search.length_range,
        max_results=cfg.api.max_results,
        layout=layout,
        labels=cfg.labels if not outside else None,
        write=cfg.output.write_fasta,
    )
    _report(result, layout)


@cli.command()
@click.option('--gene', '-g', required=True, help='Gene region, e.g. atpB')
@click.option('--outside', is_flag=True, help='Compare the outside-area session')
@click.option('--curated', type=click.Path(), help='Curated FASTA (default: results tree)')
@click.option('--output', '-o', type=click.Path(), help='Write the worklist to a file')
@click.pass_obj
@fatal_errors
def compare(obj, gene, outside, curated, output):
    """List sought taxa that did not survive curation."""
    layout = obj['layout']
    session = _load_session(layout, gene, _mode(outside))
    worklist = replacement_worklist(session, curated or layout.curated(gene))
    echo(f"{len(worklist)} of {len(session.sought)} sought taxa need replacement")
    echo_list(worklist, output)


@cli.command()
@click.option('--gene', '-g', required=True, help='Gene region, e.g. atpB')
@click.option('--outside', is_flag=True, help='Replace within the outside-area session')
@click.option('--curated', type=click.Path(), help='Curated FASTA (default: results tree)')
@click.option('--length-range', '-l', help='Inclusive sequence length range MIN:MAX')
@click.option('--max-results', type=int, help='Maximum identifiers requested per search')
@click.option('--no-fasta', is_flag=True, help='Do not write a FASTA file')
@click.pass_obj
@fatal_errors
def replace(obj, gene, outside, curated, length_range, max_results, no_fasta):
    """Search the next-ranked record for taxa rejected during curation."""
    cfg = obj['config']
    layout = obj['layout']
    cfg.merge_cli_args(length_range=length_range, max_results=max_results, no_fasta=no_fasta)

    session = _load_session(layout, gene, _mode(outside))
    client = make_client(cfg)
    result = run_replacement_round(
        session, client, layout,
        curated_path=curated,
        length_range=cfg.search.length_range,
        max_results=cfg.api.max_results,
        labels=cfg.labels if not outside else None,
        write=cfg.output.write_fasta,
    )
    if not result.records:
        echo(f"Nothing to replace for {gene}")
        return
    _report(result, layout)


@cli.command()
@click.argument('table_file', type=click.Path(exists=True))
@click.option('--gene', '-g', 'genes', required=True, multiple=True, help='Gene region (repeatable)')
@click.option('--alignment', type=click.Path(exists=True), help='Finalized alignment (single gene only)')
@click.option('--output', '-o', type=click.Path(), required=True, help='Joined table path')
@click.pass_obj
@fatal_errors
def join(obj, table_file, genes, alignment, output):
    """Add one accession column per gene to the master table."""
    cfg = obj['config']
    layout = obj['layout']
    if alignment and len(genes) > 1:
        raise click.UsageError("--alignment can only be used with a single --gene")

    table = load_master_table(
        table_file,
        combination_column=cfg.table.combination_column,
        family_column=cfg.table.family_column,
        genus_column=cfg.table.genus_column,
    )
    for gene in genes:
        table = join_accessions(
            table, gene, alignment or layout.final(gene),
            combination_column=cfg.table.combination_column,
        )
    save_master_table(table, output)
    echo(f"Joined {', '.join(genes)} accessions onto {len(table)} taxa: {output}")


@cli.command('sparse-genera')
@click.argument('table_file', type=click.Path(exists=True))
@click.option('--gene', '-g', 'genes', multiple=True, help='Gene column to inspect (repeatable)')
@click.option('--n-genes', type=int, help='Inspect the last N columns instead')
@click.option('--max-species', type=int, default=3, show_default=True, help='Species count threshold')
@click.option('--output', '-o', type=click.Path(), help='Write genera to a file')
@click.pass_obj
@fatal_errors
def sparse_genera(obj, table_file, genes, n_genes, max_species, output):
    """List genera with no sequences and few species, for outside-area search."""
    cfg = obj['config']
    table = load_master_table(
        table_file,
        combination_column=cfg.table.combination_column,
        family_column=cfg.table.family_column,
        genus_column=cfg.table.genus_column,
    )
    genera = select_sparse_genera(
        table,
        gene_columns=list(genes) or None,
        n_genes=n_genes,
        max_species=max_species,
        genus_column=cfg.table.genus_column,
        combination_column=cfg.table.combination_column,
    )
    echo_list(genera, output)


@cli.command()
@click.argument('table_file', type=click.Path(exists=True))
@click.option('--gene', '-g', required=True, help='Gene region to search, e.g. atpB')
@click.option('--column', 'columns', multiple=True, help='Gene column to inspect (repeatable)')
@click.option('--n-genes', type=int, help='Inspect the last N columns instead')
@click.option('--length-range', '-l', help='Inclusive sequence length range MIN:MAX')
@click.option('--max-results', type=int, help='Maximum identifiers requested per search')
@click.option('--no-fasta', is_flag=True, help='Do not write a FASTA file')
@click.pass_obj
@fatal_errors
def outside(obj, table_file, gene, columns, n_genes, length_range, max_results, no_fasta):
    """Search GENE outside the study area for the sparse genera of TABLE_FILE."""
    cfg = obj['config']
    layout = obj['layout']
    cfg.merge_cli_args(length_range=length_range, max_results=max_results, no_fasta=no_fasta)

    table = load_master_table(
        table_file,
        combination_column=cfg.table.combination_column,
        family_column=cfg.table.family_column,
        genus_column=cfg.table.genus_column,
    )
    client = make_client(cfg)
    result = run_outside_round(
        table, gene, client,
        gene_columns=list(columns) or None,
        n_genes=n_genes,
        layout=layout,
        genus_column=cfg.table.genus_column,
        combination_column=cfg.table.combination_column,
        length_range=cfg.search.length_range,
        max_results=cfg.api.max_results,
        write=cfg.output.write_fasta,
    )
    _report(result, layout)


@cli.command('init-config')
@click.argument('path', type=click.Path(), required=False)
def init_config(path):
    """Write an example configuration file."""
    config_path = create_example_config(Path(path) if path else None)
    echo(f"Generated example configuration file: {config_path}")


if __name__ == '__main__':
    cli()
