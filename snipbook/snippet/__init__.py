"""Snippet records and the flat file store that holds them."""

from .model import DELIMITER, TIMESTAMP_FORMAT, Record, decode, encode
from .snippet_storage import SnippetStorage

__all__ = [
    "DELIMITER",
    "Record",
    "SnippetStorage",
    "TIMESTAMP_FORMAT",
    "decode",
    "encode",
]
