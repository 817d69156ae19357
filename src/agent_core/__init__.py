"""Agent execution core: ordered steps, retries, cancellation and a result cache."""

__version__ = "0.1.0"
