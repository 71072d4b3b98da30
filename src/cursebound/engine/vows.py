"""Binding vow operations on a character.

Vows are stored and toggled here; applying their effects to a roll is
left to an opt-in modifier contributor (see ``ActiveVowModifier``).
"""

from __future__ import annotations

from uuid import UUID

from cursebound.core.exceptions import ValidationError
from cursebound.core.logging import get_logger
from cursebound.models.character import Character
from cursebound.models.enums import VowEffectKind
from cursebound.models.vows import BindingVow, VowEffect


logger = get_logger(__name__)


def add_vow(character: Character, vow: BindingVow) -> Character:
    """Attach ``vow`` to ``character``.

    Raises:
        ValidationError: If the vow belongs to another character or the
            character already owns a vow with the same id.
    """
    if vow.character_id != character.id:
        raise ValidationError(
            f"Vow '{vow.name}' belongs to another character",
            field_name="character_id",
            invalid_value=str(vow.character_id),
        )
    if character.find_vow(vow.id) is not None:
        raise ValidationError(
            f"Character '{character.name}' already has vow {vow.id}",
            field_name="id",
            invalid_value=str(vow.id),
        )
    logger.info("Binding vow added", character=character.name, vow=vow.name, kind=vow.kind.value)
    return character.with_vows((*character.binding_vows, vow))


def replace_vow(character: Character, vow: BindingVow) -> Character:
    """Insert or overwrite a vow by id; used for remote updates."""
    if vow.character_id != character.id:
        raise ValidationError(
            f"Vow '{vow.name}' belongs to another character",
            field_name="character_id",
            invalid_value=str(vow.character_id),
        )
    if character.find_vow(vow.id) is None:
        return character.with_vows((*character.binding_vows, vow))
    return character.with_vows(
        tuple(vow if existing.id == vow.id else existing for existing in character.binding_vows)
    )


def toggle_vow(character: Character, vow_id: UUID, active: bool | None = None) -> Character:
    """Flip a vow's ``active`` flag, or set it when ``active`` is given.

    Raises:
        ValidationError: If the character owns no vow with ``vow_id``.
    """
    vow = character.find_vow(vow_id)
    if vow is None:
        raise ValidationError(
            f"Character '{character.name}' has no vow {vow_id}",
            field_name="vow_id",
            invalid_value=str(vow_id),
        )
    new_active = (not vow.active) if active is None else active
    logger.info("Binding vow toggled", character=character.name, vow=vow.name, active=new_active)
    return replace_vow(character, vow.model_copy(update={"active": new_active}))


def active_vow_effects(
    character: Character,
    kind: VowEffectKind | None = None,
) -> list[VowEffect]:
    """Benefits and penalties of every active vow, optionally by kind."""
    effects = [
        effect
        for vow in character.binding_vows
        if vow.active
        for effect in vow.effects()
    ]
    if kind is None:
        return effects
    return [effect for effect in effects if effect.kind == kind]


__all__ = [
    "add_vow",
    "replace_vow",
    "toggle_vow",
    "active_vow_effects",
]
