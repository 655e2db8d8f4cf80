"""Backend package for Covey Town interactable areas."""

from .areas import ConversationArea, InteractableArea, PosterSessionArea
from .broadcast import TownBroadcaster
from .config import BackendSettings, load_settings
from .dispatcher import AreaDispatcher
from .errors import (
    GeometryError,
    InvalidInteractableIDError,
    InvalidSessionTokenError,
    InvalidTownIDError,
    TownError,
    ValidationError,
)
from .security import generate_token, hash_token
from .store import TownsStore
from .town import Player, Town

__all__ = [
    "AreaDispatcher",
    "BackendSettings",
    "ConversationArea",
    "generate_token",
    "GeometryError",
    "hash_token",
    "InteractableArea",
    "InvalidInteractableIDError",
    "InvalidSessionTokenError",
    "InvalidTownIDError",
    "load_settings",
    "Player",
    "PosterSessionArea",
    "Town",
    "TownBroadcaster",
    "TownError",
    "TownsStore",
    "ValidationError",
]
