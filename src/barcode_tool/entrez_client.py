"""Rate-limited access to the NCBI nucleotide database."""

import logging
from typing import Any, Dict, Optional

from Bio import Entrez

from .exceptions import PerItemSkip
from .rate_limiter import RateLimitConfig, TokenBucket, NCBI_MIN_INTERVAL

logger = logging.getLogger(__name__)


class EntrezClient:
    """Performs identifier searches and record fetches against Entrez.

    Every call, whether a search or a fetch, passes through the same gate,
    so consecutive requests are at least ``min_interval`` seconds apart.
    """

    DEFAULT_DATABASE = "nucleotide"
    DEFAULT_MAX_RESULTS = 20

    def __init__(self, email: Optional[str] = None, api_key: Optional[str] = None,
                 database: str = DEFAULT_DATABASE,
                 min_interval: float = NCBI_MIN_INTERVAL,
                 retry_attempts: int = 3,
                 gate: Optional[TokenBucket] = None):
        """Initialize the client.

        Args:
            email: Email for NCBI Entrez (required by NCBI guidelines)
            api_key: Optional NCBI API key
            database: Entrez database to query
            min_interval: Minimum seconds between two remote calls
            retry_attempts: Attempts Biopython makes on transient HTTP errors
            gate: Pre-built gate, overrides ``min_interval``
        """
        self.email = email or "user@example.com"
        self.api_key = api_key
        self.database = database

        Entrez.email = self.email
        if api_key:
            Entrez.api_key = api_key
        Entrez.max_tries = retry_attempts

        self.gate = gate or TokenBucket(RateLimitConfig(min_interval=min_interval))

    def search(self, term: str, rank: int = 1,
               max_results: int = DEFAULT_MAX_RESULTS) -> Optional[str]:
        """Return the identifier at 1-based ``rank`` among the matches.

        Replacement rounds raise ``rank`` to skip records rejected during
        curation. This assumes Entrez returns matches in a stable order
        across repeated searches, which the remote service does not promise.

        Args:
            term: Entrez query string
            rank: Position of the identifier to return (1 = first match)
            max_results: Cap on matches requested from the server

        Returns:
            The selected identifier, or None if fewer than ``rank`` matches

        Raises:
            PerItemSkip: If the remote search fails
        """
        if rank < 1:
            raise ValueError(f"rank must be >= 1, got {rank}")

        try:
            handle = self.gate.call(
                Entrez.esearch,
                db=self.database,
                term=term,
                retmax=max(max_results, rank),
            )
            try:
                result = Entrez.read(handle)
            finally:
                handle.close()
        except Exception as e:
            raise PerItemSkip(f"Search failed for '{term}': {e}",
                              item=term, stage="search") from e

        id_list = list(result.get("IdList", []))
        logger.debug(f"Search '{term}' returned {len(id_list)} identifiers")

        if len(id_list) < rank:
            return None
        return str(id_list[rank - 1])

    def fetch(self, identifier: str) -> Dict[str, Any]:
        """Fetch the full GenBank record for one identifier as a GBSeq dict.

        Raises:
            PerItemSkip: If the fetch fails or returns nothing
        """
        try:
            handle = self.gate.call(
                Entrez.efetch,
                db=self.database,
                id=identifier,
                rettype="gb",
                retmode="xml",
            )
            try:
                records = Entrez.read(handle)
            finally:
                handle.close()
        except Exception as e:
            raise PerItemSkip(f"Fetch failed for {identifier}: {e}",
                              item=identifier, stage="fetch") from e

        if not records:
            raise PerItemSkip(f"Fetch returned no record for {identifier}",
                              item=identifier, stage="fetch")
        return records[0]

    def get_stats(self) -> Dict[str, Any]:
        return self.gate.get_stats()
