"""Sieve engine: text processing, query vectors, and cosine scoring."""
