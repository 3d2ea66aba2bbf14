"""Allow ``python -m nanogen``."""

from __future__ import annotations

from nanogen.cli import novel

if __name__ == "__main__":
    novel.main()
