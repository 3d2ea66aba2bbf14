"""Sentence-recombination novel generator."""

__version__ = "0.1.0"
