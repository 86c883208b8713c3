"""Register a self-hosted GitHub Actions runner on this host."""

__version__ = "0.1.0"
