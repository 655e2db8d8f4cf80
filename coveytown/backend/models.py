"""Geometry records and wire models for towns and interactable areas."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class AreaKind(str, Enum):
    POSTER_SESSION = "PosterSessionArea"
    CONVERSATION = "ConversationArea"


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class MapObject:
    """One area rectangle as supplied by the map geometry provider."""

    name: str
    type: str
    x: float
    y: float
    width: float | None = None
    height: float | None = None


@dataclass(frozen=True)
class TownSummary:
    town_id: str
    friendly_name: str
    current_occupancy: int


class PosterSessionAreaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["PosterSessionArea"] = "PosterSessionArea"
    id: str
    stars: int = 0
    title: str | None = None
    image_contents: str | None = Field(default=None, alias="imageContents")


class ConversationAreaModel(BaseModel):
    kind: Literal["ConversationArea"] = "ConversationArea"
    id: str
    topic: str | None = None
