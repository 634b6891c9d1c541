"""Exception types raised by the analysis core."""


class ConfigurationError(ValueError):
    """Raised before any data scan when the call arguments cannot be honored.

    Examples are an unsupported comparison operator, a non-numeric field requested
    under a numeric-only operation, or an empty training set for the classifier.
    These are deterministic given the arguments and are never retried.
    """


__all__ = ["ConfigurationError"]
