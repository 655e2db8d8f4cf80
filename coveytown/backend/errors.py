"""Error kinds raised by the interactable-area core."""

from __future__ import annotations


class TownError(Exception):
    """Base class for every rejected town operation."""


class InvalidTownIDError(TownError):
    def __init__(self, town_id: str) -> None:
        super().__init__(f"Invalid town ID: {town_id}")
        self.town_id = town_id


class InvalidSessionTokenError(TownError):
    def __init__(self) -> None:
        super().__init__("Invalid session token")


class InvalidInteractableIDError(TownError):
    def __init__(self, area_id: str | None) -> None:
        super().__init__(f"Invalid interactable ID: {area_id}")
        self.area_id = area_id


class ValidationError(TownError):
    """Variant payload rejected; ``field`` names the offending field."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class GeometryError(TownError):
    """Map geometry cannot produce an area."""
