"""DNA barcode acquisition and curation tool.

Retrieves barcode sequences for plant taxa from NCBI nucleotide under the
Entrez rate limit, writes per-gene FASTA files for external clustering,
alignment and tree building, and reconciles curated files against the taxa
that were sought to drive replacement rounds.
"""

__version__ = "1.0.0"
__author__ = "Austin P. Morrissey"

from .acquisition import AcquisitionResult, acquire, run_outside_round, run_replacement_round
from .comparator import compare_taxa, replacement_worklist, retained_taxa
from .entrez_client import EntrezClient
from .exceptions import (
    BarcodeToolError, ConfigurationError, MalformedCurationFile,
    NoResultsError, PerItemSkip
)
from .fasta_writer import LabelConfig, build_label, write_fasta
from .session import AcquisitionSession
from .taxon_patterns import TaxonMode
from .term_builder import build_search_term
