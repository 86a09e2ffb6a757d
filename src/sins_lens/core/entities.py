from pathlib import Path
from urllib.parse import unquote, urlparse

from sins_lens.core.pointers import PointerType

# Every file family the game reads as JSON.
JSON_EXTENSIONS: tuple[str, ...] = (
    ".ability",
    ".action_data_source",
    ".beam_effect",
    ".brush",
    ".buff",
    ".button_style",
    ".cursor",
    ".death_sequence",
    ".drop_box_style",
    ".entity_manifest",
    ".exhaust_trail_effect",
    ".exotic",
    ".flight_pattern",
    ".font",
    ".formation",
    ".gdpr_accept_data",
    ".gravity_well_props",
    ".gui",
    ".label_style",
    ".list_box_style",
    ".localized_text",
    ".mesh_material",
    ".named_colors",
    ".npc_reward",
    ".particle_effect",
    ".player_color_group",
    ".player_icon",
    ".player_portrait",
    ".player",
    ".playtime_message",
    ".reflect_box_style",
    ".research_subject",
    ".scroll_bar_style",
    ".shield_effect",
    ".skybox",
    ".sound",
    ".start_mode",
    ".text_entry_box_style",
    ".texture_animation",
    ".uniforms",
    ".unit_item",
    ".unit_skin",
    ".unit",
    ".weapon",
    ".welcome_message",
)

# Existence categories derived from file stems on disk.
_FILE_BACKED_CATEGORIES: dict[PointerType, str] = {
    PointerType.ABILITY: ".ability",
    PointerType.ACTION_DATA_SOURCE: ".action_data_source",
    PointerType.BEAM_EFFECT: ".beam_effect",
    PointerType.BRUSH: ".png",
    PointerType.BUFF: ".buff",
    PointerType.EXOTIC: ".exotic",
    PointerType.FLIGHT_PATTERN: ".flight_pattern",
    PointerType.FORMATION: ".formation",
    PointerType.GRAVITY_WELL_PROPS: ".gravity_well_props",
    PointerType.MESH: ".mesh",
    PointerType.MESH_MATERIAL: ".mesh_material",
    PointerType.NPC_REWARD: ".npc_reward",
    PointerType.PARTICLE_EFFECT: ".particle_effect",
    PointerType.PLAYER: ".player",
    PointerType.RESEARCH_SUBJECT: ".research_subject",
    PointerType.START_MODE: ".start_mode",
    PointerType.TEXTURE: ".dds",
    PointerType.TTF_FONT: ".ttf",
    PointerType.UNIT: ".unit",
    PointerType.UNIT_ITEM: ".unit_item",
    PointerType.UNIT_SKIN: ".unit_skin",
    PointerType.WEAPON: ".weapon",
}

# Image-backed categories are referenced both with and without their extension.
_KEEPS_EXTENSION: frozenset[PointerType] = frozenset({PointerType.BRUSH, PointerType.TEXTURE})

LOCALIZED_TEXT_SUFFIX = ".localized_text"


def file_backed_categories() -> dict[PointerType, str]:
    return dict(_FILE_BACKED_CATEGORIES)


def keeps_extension(category: PointerType) -> bool:
    return category in _KEEPS_EXTENSION


def identifier_from_path(file_path: Path) -> str:
    """Return the lower-cased identifier of a file: its name up to the first dot."""
    return file_path.name.split(".")[0].lower()


def uri_to_path(uri: str) -> Path:
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(uri)


def entity_type_from_uri(uri: str) -> PointerType:
    """Map a document's extension to the entity category being edited."""
    suffix = uri_to_path(uri).suffix.lower()
    if not suffix:
        return PointerType.NONE
    return PointerType.parse(suffix[1:])


def is_json_document(path: Path) -> bool:
    return path.suffix.lower() in JSON_EXTENSIONS
