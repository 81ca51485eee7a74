"""Screen models: UI state holders with no rendering of their own."""

from .base import ScreenModel
from .details_model import DetailsScreenModel, DetailsUiState
from .favorites_model import FavoritesScreenModel, FavoritesUiState
from .list_model import ListScreenModel, ListUiState

__all__ = [
    "DetailsScreenModel",
    "DetailsUiState",
    "FavoritesScreenModel",
    "FavoritesUiState",
    "ListScreenModel",
    "ListUiState",
    "ScreenModel",
]
