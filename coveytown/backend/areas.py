"""Interactable areas and the content variants they carry."""

from __future__ import annotations

import logging
import typing
from typing import Any, Callable, Protocol

from .broadcast import INTERACTABLE_UPDATE, TownBroadcaster
from .errors import GeometryError, ValidationError
from .models import AreaKind, BoundingBox, ConversationAreaModel, MapObject, PosterSessionAreaModel

if typing.TYPE_CHECKING:
    from .town import Player

logger = logging.getLogger(__name__)


class AreaVariant(Protocol):
    """Capabilities every area variant provides to ``InteractableArea``."""

    kind: AreaKind

    def on_occupants_emptied(self) -> None:
        """Reset content after the last occupant left."""

    def serialize(self) -> dict[str, Any]:
        """Return the variant's content fields for the wire model."""

    def apply_update(self, model: Any) -> None:
        """Replace the content fields from a wire model."""


def _check_optional_text(field: str, value: Any) -> None:
    if value is None:
        return
    if not isinstance(value, str) or value == "":
        raise ValidationError(field, f"{field} was not given or is invalid")


def _check_optional_blob(field: str, value: Any) -> None:
    if value is not None and not isinstance(value, str):
        raise ValidationError(field, f"{field} was not given or is invalid")


def _require_text(field: str, value: Any) -> None:
    if not isinstance(value, str) or value == "":
        raise ValidationError(field, f"{field} is required")


class PosterSessionArea:
    """Poster content: a star rating, a title and an image payload."""

    kind = AreaKind.POSTER_SESSION

    def __init__(self, stars: int = 0, title: str | None = None, image_contents: str | None = None) -> None:
        _check_optional_text("title", title)
        _check_optional_blob("imageContents", image_contents)
        self._stars = abs(stars)
        self._title = title
        self._image_contents = image_contents

    @classmethod
    def from_model(cls, model: PosterSessionAreaModel) -> PosterSessionArea:
        return cls(stars=model.stars, title=model.title, image_contents=model.image_contents)

    @property
    def stars(self) -> int:
        return self._stars

    @property
    def title(self) -> str | None:
        return self._title

    @property
    def image_contents(self) -> str | None:
        return self._image_contents

    @staticmethod
    def validate_update(model: PosterSessionAreaModel) -> None:
        """Reject content that cannot populate a poster."""
        _require_text("title", model.title)
        _require_text("imageContents", model.image_contents)

    def apply_update(self, model: PosterSessionAreaModel) -> None:
        _check_optional_text("title", model.title)
        _check_optional_blob("imageContents", model.image_contents)
        self._stars = abs(model.stars)
        self._title = model.title
        self._image_contents = model.image_contents

    update_model = apply_update

    def increment_stars(self) -> int:
        self._stars += 1
        return self._stars

    def get_image_contents(self) -> str | None:
        return self._image_contents

    def on_occupants_emptied(self) -> None:
        self._stars = 0
        self._title = None
        self._image_contents = None

    def serialize(self) -> dict[str, Any]:
        return {
            "stars": self._stars,
            "title": self._title,
            "imageContents": self._image_contents,
        }


class ConversationArea:
    """Conversation content: the topic occupants are talking about."""

    kind = AreaKind.CONVERSATION

    def __init__(self, topic: str | None = None) -> None:
        _check_optional_text("topic", topic)
        self._topic = topic

    @property
    def topic(self) -> str | None:
        return self._topic

    @staticmethod
    def validate_update(model: ConversationAreaModel) -> None:
        _require_text("topic", model.topic)

    def apply_update(self, model: ConversationAreaModel) -> None:
        _check_optional_text("topic", model.topic)
        self._topic = model.topic

    def on_occupants_emptied(self) -> None:
        self._topic = None

    def serialize(self) -> dict[str, Any]:
        return {"topic": self._topic}


VARIANT_FACTORIES: dict[AreaKind, Callable[[], AreaVariant]] = {
    AreaKind.POSTER_SESSION: PosterSessionArea,
    AreaKind.CONVERSATION: ConversationArea,
}


class InteractableArea:
    """A fixed region of a town whose content is shared by every observer.

    The id and bounding box are fixed at construction. Content changes go
    through ``variant`` and become visible to clients only via
    ``emit_changed``.
    """

    def __init__(
        self,
        area_id: str,
        bounding_box: BoundingBox,
        variant: AreaVariant,
        broadcaster: TownBroadcaster,
    ) -> None:
        self._id = area_id
        self._bounding_box = bounding_box
        self._variant = variant
        self._broadcaster = broadcaster
        self._occupants: set[str] = set()

    @property
    def id(self) -> str:
        return self._id

    @property
    def bounding_box(self) -> BoundingBox:
        return self._bounding_box

    @property
    def kind(self) -> AreaKind:
        return self._variant.kind

    @property
    def variant(self) -> AreaVariant:
        return self._variant

    @property
    def occupants(self) -> frozenset[str]:
        return frozenset(self._occupants)

    @property
    def is_active(self) -> bool:
        return bool(self._occupants)

    def add_occupant(self, player: Player) -> None:
        self._occupants.add(player.player_id)
        player.area_id = self._id

    def remove_occupant(self, player: Player) -> None:
        if player.player_id not in self._occupants:
            return
        self._occupants.discard(player.player_id)
        player.area_id = None
        if not self._occupants:
            self._variant.on_occupants_emptied()
            logger.info("Area %s emptied, content reset", self._id)
            self.emit_changed()

    def emit_changed(self) -> None:
        self._broadcaster.publish(INTERACTABLE_UPDATE, self.to_model())

    def to_model(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "id": self._id, **self._variant.serialize()}

    @classmethod
    def from_map_object(cls, map_object: MapObject, broadcaster: TownBroadcaster) -> InteractableArea:
        """Build an area with empty content from one map rectangle."""
        if not map_object.width or not map_object.height:
            raise GeometryError(f"Missing width and/or height in map object {map_object.name}")
        try:
            kind = AreaKind(map_object.type)
        except ValueError:
            raise GeometryError(f"Unknown area type {map_object.type!r} for {map_object.name}") from None
        bounding_box = BoundingBox(
            x=map_object.x,
            y=map_object.y,
            width=map_object.width,
            height=map_object.height,
        )
        return cls(map_object.name, bounding_box, VARIANT_FACTORIES[kind](), broadcaster)
