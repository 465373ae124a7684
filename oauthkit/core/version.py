"""Package version, importable without pulling in the client."""

__version__ = "0.1.0"
