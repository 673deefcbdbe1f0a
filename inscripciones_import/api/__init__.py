from .client import ApiError, CatalogResource, CollaboratorStore, HttpResource, http_store

__all__ = [
    "ApiError",
    "CatalogResource",
    "CollaboratorStore",
    "HttpResource",
    "http_store",
]
