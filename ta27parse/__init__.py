"""Tokenizer, source decoding and grammar tables for Python 2.7 source with type comments."""

__version__ = "0.1.0"
__all__ = ["decoding", "grammar", "tokenizer", "tokens"]