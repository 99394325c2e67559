"""taskpiper: task and user REST API over a document store."""

__version__ = "1.0.0"
