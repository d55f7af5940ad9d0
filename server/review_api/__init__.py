"""Review app server: anonymous user lookup API over the review app SQLite store."""

__version__ = "1.0.0"
