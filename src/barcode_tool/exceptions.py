"""Exception types raised by the barcode acquisition and curation tool."""


class BarcodeToolError(Exception):
    """Base class for all tool errors."""


class ConfigurationError(BarcodeToolError):
    """A required parameter is missing or invalid.

    Raised before any remote call is made, so no partial state exists.
    """


class NoResultsError(BarcodeToolError):
    """An acquisition round resolved no identifier or no record across all taxa."""


class PerItemSkip(BarcodeToolError):
    """A single search, fetch or parse failed for one taxon.

    Caught by the acquisition loop, logged and recorded as a skipped item.
    """

    def __init__(self, message: str, item: str = "", stage: str = ""):
        super().__init__(message)
        self.item = item
        self.stage = stage


class MalformedCurationFile(BarcodeToolError):
    """A curated sequence file could not be read during reconciliation."""
