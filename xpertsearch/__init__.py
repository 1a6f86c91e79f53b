"""
XpertSearch - AI-assisted product search orchestration for e-commerce shops.

Example:
    >>> from xpertsearch.domains.search import SearchRequest
    >>> from xpertsearch.domains.search.orchestrator import SearchOrchestrator
    >>> result = await orchestrator.search(SearchRequest(query="red dress", shop_id="shop-1"))
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
