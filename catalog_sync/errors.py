"""
Custom errors for the catalog service.
Raised by the source adapters and the revalidation trigger, handled in the routes.
"""


class CatalogError(Exception):
    """Generic catalog service error."""
    pass


# ---------------- Upstreams ----------------

class UpstreamUnavailable(CatalogError):
    """Network, auth or quota failure talking to the content store or the spreadsheet."""
    pass


class RetryExhaustedError(UpstreamUnavailable):
    """Every retry attempt against an upstream failed."""
    pass


class ConfigurationMissing(CatalogError):
    """A required credential or identifier is not configured."""

    def __init__(self, variable: str):
        super().__init__(f"{variable} is not configured")
        self.variable = variable


# ---------------- Data ----------------

class ParseAnomaly(CatalogError):
    """A spreadsheet cell did not parse as expected (always recovered with a default)."""
    pass


# ---------------- Access ----------------

class Unauthorized(CatalogError):
    """Revalidation secret mismatch."""
    pass
