from enum import Enum


class PointerType(str, Enum):
    """Semantic category of a JSON string value that references another identifier namespace."""

    NONE = "none"
    ABILITY = "ability"
    ACTION_DATA_SOURCE = "action_data_source"
    ACTION_VALUE_ID = "action_value_id"
    BEAM_EFFECT = "beam_effect"
    BRUSH = "brush"
    BUFF = "buff"
    BUFF_UNIT_FACTORY_MODIFIER = "buff_unit_factory_modifier"
    BUFF_UNIT_MODIFIER = "buff_unit_modifier"
    DEATH_SEQUENCE_GROUP = "death_sequence_group"
    EXOTIC = "exotic"
    FLIGHT_PATTERN = "flight_pattern"
    FORMATION = "formation"
    GRAVITY_WELL_PROPS = "gravity_well_props"
    LOCALIZED_TEXT = "localized_text"
    MESH = "mesh"
    MESH_MATERIAL = "mesh_material"
    NPC_REWARD = "npc_reward"
    PARTICLE_EFFECT = "particle_effect"
    PLAYER = "player"
    RESEARCH_SUBJECT = "research_subject"
    SPECIAL_OPERATION_UNIT_KIND = "special_operation_unit_kind"
    START_MODE = "start_mode"
    TEXTURE = "texture"
    TTF_FONT = "ttf_font"
    UNIT = "unit"
    UNIT_ITEM = "unit_item"
    UNIT_SKIN = "unit_skin"
    WEAPON = "weapon"
    WEAPON_TAG = "weapon_tag"

    @classmethod
    def parse(cls, value: str | None) -> "PointerType":
        if not value:
            return cls.NONE
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.NONE


# Categories that may appear as `<category>.entity_manifest`, in configuration order.
MANIFEST_CATEGORIES: tuple[PointerType, ...] = (
    PointerType.WEAPON,
    PointerType.UNIT_SKIN,
    PointerType.UNIT_ITEM,
    PointerType.UNIT,
    PointerType.START_MODE,
    PointerType.RESEARCH_SUBJECT,
    PointerType.PLAYER,
    PointerType.NPC_REWARD,
    PointerType.FORMATION,
    PointerType.FLIGHT_PATTERN,
    PointerType.EXOTIC,
    PointerType.BUFF,
    PointerType.ACTION_DATA_SOURCE,
    PointerType.ABILITY,
)

# Categories whose values must additionally be registered in their entity manifest.
MANIFEST_CHECKED: frozenset[PointerType] = frozenset(
    {PointerType.UNIT_SKIN, PointerType.UNIT, PointerType.WEAPON, PointerType.UNIT_ITEM}
)
