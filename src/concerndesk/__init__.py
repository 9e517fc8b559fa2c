"""Student support requests with teacher usage quotas."""

__version__ = "0.1.0"
