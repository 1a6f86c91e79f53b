"""
Domains - Business logic layer.

Each domain is self-contained with:
- contracts.py: Interfaces (Protocol classes)
- models.py: Pydantic data models
- Implementation files
- test_*.py modules alongside the code
"""

__all__ = [
    "search",
    "retrieval",
    "ranking",
    "cache",
    "facets",
    "understanding",
    "analytics",
]
