# src/repofetch/__init__.py
"""Clone repositories, pin them to commits, extract subtrees and prune directories."""

__version__ = "0.1.0"
