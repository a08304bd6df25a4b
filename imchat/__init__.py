"""Chat data model, client navigation state, logging setup, and in-process file and message storage services."""

__version__ = "0.1.0"