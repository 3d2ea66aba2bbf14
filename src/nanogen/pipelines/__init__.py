"""Reusable pipeline contracts for novel generation workflows."""

from nanogen.pipelines.results import NovelResult

__all__ = ["NovelResult"]
