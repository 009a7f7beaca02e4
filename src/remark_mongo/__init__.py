"""MongoDB storage backend for the Remark42 comments engine."""

__version__ = "1.0.0"
