"""Lexical index implementations."""
from .bm25_index import BM25LexicalIndex, tokenize

__all__ = ["BM25LexicalIndex", "tokenize"]
