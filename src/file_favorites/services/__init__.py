"""Services for loading, saving and changing favorites."""

from .document_storage import DocumentStorage, FavoritesError, FavoritesStorageError
from .favorites_reconciler import FavoritesParseError, FavoritesReconciler, ReconciledFavorites
from .favorite_store import FavoriteStore, StoreBusyError, StoreEvent, StoreEventKind
from .restoration_point import RestorationPoint

__all__ = [
    "DocumentStorage",
    "FavoriteStore",
    "FavoritesError",
    "FavoritesParseError",
    "FavoritesReconciler",
    "FavoritesStorageError",
    "ReconciledFavorites",
    "RestorationPoint",
    "StoreBusyError",
    "StoreEvent",
    "StoreEventKind",
]
