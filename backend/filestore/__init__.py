"""filestore: a minimal HTTP file store backed by a local directory."""

__version__ = "0.1.0"
