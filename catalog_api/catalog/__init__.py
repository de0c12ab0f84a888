"""Product catalog read side.

Provides the search and aggregation engine, the persistence boundary
(repository protocol with in-memory and SQLAlchemy implementations) and
the read service built on both.
"""

from catalog_api.catalog.search import (
    ProductSearchCriteria,
    ProductSearchEngine,
    ProductSearchResult,
    ProductView,
    SearchCandidate,
    SortKey,
)
from catalog_api.catalog.repository import (
    CatalogRepository,
    InMemoryCatalogRepository,
    InMemoryCatalogStore,
    get_catalog_store,
    reset_catalog_store,
)
from catalog_api.catalog.service import CatalogService, CatalogStatistics

__all__ = [
    # Search
    "ProductSearchCriteria",
    "ProductSearchEngine",
    "ProductSearchResult",
    "ProductView",
    "SearchCandidate",
    "SortKey",
    # Repository
    "CatalogRepository",
    "InMemoryCatalogRepository",
    "InMemoryCatalogStore",
    "get_catalog_store",
    "reset_catalog_store",
    # Service
    "CatalogService",
    "CatalogStatistics",
]
