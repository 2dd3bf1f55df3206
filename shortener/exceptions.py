class ShortenerError(Exception):
    """Base class for errors raised by the shortener core."""

class ValidationError(ShortenerError):
    """Input rejected before touching storage (reported as HTTP 400)."""

class ConflictError(ShortenerError):
    """Record already exists, either found up front or rejected by a unique constraint (HTTP 409)."""

class ConfigurationError(ShortenerError):
    """Required secret or key material is missing. Fatal at startup."""
