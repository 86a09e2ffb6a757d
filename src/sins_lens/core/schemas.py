"""Entity families and the pointer annotation of their JSON Schemas.

Every family starts from a base schema shipped in ``sins_lens/schemas``. Annotation
never writes into the schema itself: markers live in a side table keyed by JSON
Pointer, and :class:`SchemaFragment` exposes them together with the schema node.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any

from sins_lens.core.entities import uri_to_path
from sins_lens.core.errors import SchemaAnnotationError
from sins_lens.core.pointers import MANIFEST_CATEGORIES, PointerType

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"

# Shared `$defs` markers; a definition missing from a base schema is skipped.
COMMON_DEF_POINTERS: dict[str, PointerType] = {
    "death_sequence_group_definition_ptr": PointerType.DEATH_SEQUENCE_GROUP,
    "mesh_material_ptr": PointerType.MESH_MATERIAL,
    "exotic_type": PointerType.EXOTIC,
    "special_operation_unit_kind": PointerType.SPECIAL_OPERATION_UNIT_KIND,
    "mesh_ptr": PointerType.MESH,
    "gravity_well_props_definition_ptr": PointerType.GRAVITY_WELL_PROPS,
    "localized_text_ptr": PointerType.LOCALIZED_TEXT,
    "file_texture_ptr": PointerType.TEXTURE,
    "unit_skin_definition_ptr": PointerType.UNIT_SKIN,
    "npc_reward_definition_ptr": PointerType.NPC_REWARD,
    "particle_effect_definition_ptr": PointerType.PARTICLE_EFFECT,
    "beam_effect_definition_ptr": PointerType.BEAM_EFFECT,
    "action_data_source_definition_ptr": PointerType.ACTION_DATA_SOURCE,
    "brush_ptr": PointerType.BRUSH,
    "unit_definition_ptr": PointerType.UNIT,
    "buff_definition_ptr": PointerType.BUFF,
    "action_value_id": PointerType.ACTION_VALUE_ID,
    "research_subject_definition_ptr": PointerType.RESEARCH_SUBJECT,
    "ability_definition_ptr": PointerType.ABILITY,
    "unit_item_definition_ptr": PointerType.UNIT_ITEM,
    "buff_unit_factory_modifier_id": PointerType.BUFF_UNIT_FACTORY_MODIFIER,
    "buff_unit_modifier_id": PointerType.BUFF_UNIT_MODIFIER,
}


def escape_token(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def unescape_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def split_pointer(pointer: str) -> list[str]:
    if not pointer:
        return []
    if not pointer.startswith("/"):
        raise ValueError(f"Invalid JSON pointer: {pointer!r}")
    return [unescape_token(token) for token in pointer[1:].split("/")]


def join_pointer(location: str, *segments: str | int) -> str:
    return location + "".join(f"/{escape_token(str(segment))}" for segment in segments)


def resolve_json_pointer(document: Any, pointer: str) -> Any | None:
    """Return the node at ``pointer`` or ``None`` when any segment is missing."""
    current = document
    for token in split_pointer(pointer):
        if isinstance(current, dict):
            if token not in current:
                return None
            current = current[token]
        elif isinstance(current, list):
            if not token.isdigit() or int(token) >= len(current):
                return None
            current = current[int(token)]
        else:
            return None
    return current


def _set_json_pointer(document: Any, pointer: str, value: Any) -> bool:
    tokens = split_pointer(pointer)
    if not tokens:
        return False
    parent = resolve_json_pointer(document, join_pointer("", *tokens[:-1]))
    if not isinstance(parent, dict):
        return False
    parent[tokens[-1]] = value
    return True


@dataclass(frozen=True)
class EntitySchema:
    """Declarative description of one entity family.

    ``pointers`` and ``patches`` address existing schema nodes; ``replacements``
    overwrite a node wholesale before markers are attached. A family with
    ``categories`` expands into one schema per category, with ``{category}``
    substituted into ``file_match`` and every ``category_pointers`` location
    marked with that category.
    """

    name: str
    file_match: str
    schema_file: str
    pointers: Mapping[str, PointerType] = field(default_factory=dict)
    patches: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    replacements: Mapping[str, Any] = field(default_factory=dict)
    common_pointers: bool = True
    categories: tuple[PointerType, ...] = ()
    category_pointers: tuple[str, ...] = ()


_UNIQUE = {"uniqueItems": True}

ENTITY_SCHEMAS: tuple[EntitySchema, ...] = (
    EntitySchema(
        name="unit",
        file_match="*.unit",
        schema_file="unit-schema.json",
        pointers={
            "/$defs/unit_skin_definition_group/items/properties/skins": PointerType.UNIT_SKIN,
            "/$defs/unit_weapons_definition/properties/weapons/items/properties/weapon": PointerType.WEAPON,
        },
        patches={"/$defs/unit_skin_definition_group/items/properties/skins": _UNIQUE},
    ),
    EntitySchema(
        name="weapon",
        file_match="*.weapon",
        schema_file="weapon-schema.json",
        pointers={"/properties/name": PointerType.LOCALIZED_TEXT, "/properties/tags": PointerType.WEAPON_TAG},
        patches={"/properties/tags": _UNIQUE},
        replacements={"/properties/bombing_damage": {"type": "number"}},
    ),
    EntitySchema(name="unit_skin", file_match="*.unit_skin", schema_file="unit-skin-schema.json"),
    EntitySchema(name="ability", file_match="*.ability", schema_file="ability-schema.json"),
    EntitySchema(name="buff", file_match="*.buff", schema_file="buff-schema.json"),
    EntitySchema(
        name="action_data_source", file_match="*.action_data_source", schema_file="action-data-source-schema.json"
    ),
    EntitySchema(
        name="exotic",
        file_match="*.exotic",
        schema_file="exotic-schema.json",
        pointers={
            "/properties/name": PointerType.LOCALIZED_TEXT,
            "/properties/description": PointerType.LOCALIZED_TEXT,
            "/properties/tooltip_icon": PointerType.BRUSH,
            "/properties/small_icon": PointerType.BRUSH,
            "/properties/large_icon": PointerType.BRUSH,
            "/properties/picture": PointerType.BRUSH,
        },
    ),
    EntitySchema(
        name="player",
        file_match="*.player",
        schema_file="player-schema.json",
        pointers={"/properties/buildable_units": PointerType.UNIT},
    ),
    EntitySchema(name="research_subject", file_match="*.research_subject", schema_file="research-subject-schema.json"),
    EntitySchema(name="unit_item", file_match="*.unit_item", schema_file="unit-item-schema.json"),
    EntitySchema(name="flight_pattern", file_match="*.flight_pattern", schema_file="flight-pattern-schema.json"),
    EntitySchema(name="formation", file_match="*.formation", schema_file="formation-schema.json"),
    EntitySchema(name="npc_reward", file_match="*.npc_reward", schema_file="npc-reward-schema.json"),
    EntitySchema(name="start_mode", file_match="*.start_mode", schema_file="start-mode-schema.json"),
    EntitySchema(name="named_colors", file_match="*.named_colors", schema_file="named-colors-schema.json"),
    EntitySchema(
        name="font",
        file_match="*.font",
        schema_file="font-schema.json",
        pointers={"/$defs/ttf_ptr": PointerType.TTF_FONT},
    ),
    EntitySchema(
        name="localized_text",
        file_match="*.localized_text",
        schema_file="localized-text-schema.json",
        pointers={"/patternProperties/.*": PointerType.LOCALIZED_TEXT},
    ),
    EntitySchema(
        name="galaxy_generator",
        file_match="galaxy_generator.uniforms",
        schema_file="galaxy-generator-uniforms-schema.json",
        replacements={"/properties/fillings": {"type": "object"}},
    ),
    EntitySchema(name="weapon_uniforms", file_match="weapon.uniforms", schema_file="weapon-uniforms-schema.json"),
    EntitySchema(
        name="entity_manifest",
        file_match="{category}.entity_manifest",
        schema_file="entity-manifest-schema.json",
        common_pointers=False,
        categories=MANIFEST_CATEGORIES,
        category_pointers=("/properties/ids",),
    ),
)


@dataclass(frozen=True)
class AnnotatedSchema:
    """One entry of the schema configuration: file match, schema URI, schema and its markers."""

    name: str
    file_match: str
    uri: str
    schema: dict[str, Any]
    markers: Mapping[str, PointerType] = field(default_factory=dict)

    @property
    def root(self) -> SchemaFragment:
        return SchemaFragment(owner=self, location="", schema=self.schema)

    def matches(self, uri: str) -> bool:
        return fnmatchcase(uri_to_path(uri).name.lower(), self.file_match.lower())

    def fragment(self, location: str) -> SchemaFragment | None:
        node = resolve_json_pointer(self.schema, location)
        if node is None:
            return None
        return SchemaFragment(owner=self, location=location, schema=node)

    def payload(self) -> dict[str, Any]:
        """Configuration triple for a generic JSON language service."""
        return {"fileMatch": [self.file_match], "uri": self.uri, "schema": self.schema}


@dataclass(frozen=True)
class SchemaFragment:
    """A schema node addressed inside its :class:`AnnotatedSchema`."""

    owner: AnnotatedSchema = field(repr=False)
    location: str
    schema: Any = field(repr=False, compare=False)

    def child(self, *segments: str | int) -> SchemaFragment | None:
        return self.owner.fragment(join_pointer(self.location, *segments))

    def resolve(self) -> SchemaFragment:
        """Follow local ``$ref`` links; remote references are left unresolved."""
        seen = {self.location}
        current = self
        while isinstance(current.schema, dict):
            ref = current.schema.get("$ref")
            if not isinstance(ref, str) or not ref.startswith("#"):
                break
            target_location = ref[1:]
            if target_location in seen:
                logger.debug("Reference cycle at %s in %s", ref, self.owner.uri)
                break
            target = self.owner.fragment(target_location)
            if target is None:
                break
            seen.add(target_location)
            current = target
        return current

    @property
    def pointer(self) -> PointerType:
        for location in (self.location, *self._ref_chain()):
            marker = self.owner.markers.get(location)
            if marker is not None:
                return marker
        items = self.resolve().child("items")
        if items is not None and isinstance(items.schema, dict):
            return items.pointer
        return PointerType.NONE

    def _ref_chain(self) -> Iterator[str]:
        seen = {self.location}
        current: Any = self.schema
        while isinstance(current, dict) and isinstance(current.get("$ref"), str):
            ref = current["$ref"]
            if not ref.startswith("#") or ref[1:] in seen:
                return
            seen.add(ref[1:])
            yield ref[1:]
            current = resolve_json_pointer(self.owner.schema, ref[1:])

    @property
    def properties(self) -> dict[str, SchemaFragment]:
        props = self.schema.get("properties") if isinstance(self.schema, dict) else None
        if not isinstance(props, dict):
            return {}
        return {
            key: SchemaFragment(self.owner, join_pointer(self.location, "properties", key), value)
            for key, value in props.items()
        }

    @property
    def pattern_properties(self) -> list[tuple[str, SchemaFragment]]:
        patterns = self.schema.get("patternProperties") if isinstance(self.schema, dict) else None
        if not isinstance(patterns, dict):
            return []
        return [
            (pattern, SchemaFragment(self.owner, join_pointer(self.location, "patternProperties", pattern), value))
            for pattern, value in patterns.items()
        ]


def _load_base(schemas_dir: Path, schema_file: str) -> dict[str, Any]:
    path = schemas_dir / schema_file
    try:
        with path.open(encoding="utf-8") as handle:
            schema = json.load(handle)
    except FileNotFoundError:
        raise SchemaAnnotationError(f"Base schema not found: {path}") from None
    if not isinstance(schema, dict):
        raise SchemaAnnotationError(f"Base schema is not an object: {path}")
    return schema


def _annotate(
    family: EntitySchema,
    schema: dict[str, Any],
    extra: Mapping[str, PointerType],
) -> dict[str, PointerType]:
    for location, replacement in family.replacements.items():
        if not _set_json_pointer(schema, location, copy.deepcopy(replacement)):
            raise SchemaAnnotationError(f"{family.name}: cannot replace missing node {location}")

    markers: dict[str, PointerType] = {}
    if family.common_pointers:
        for definition, pointer in COMMON_DEF_POINTERS.items():
            location = join_pointer("", "$defs", definition)
            if resolve_json_pointer(schema, location) is not None:
                markers[location] = pointer

    for location, pointer in {**family.pointers, **extra}.items():
        if resolve_json_pointer(schema, location) is None:
            raise SchemaAnnotationError(f"{family.name}: no schema node at {location}")
        markers[location] = pointer

    for location, patch in family.patches.items():
        node = resolve_json_pointer(schema, location)
        if not isinstance(node, dict):
            raise SchemaAnnotationError(f"{family.name}: cannot patch missing node {location}")
        node.update(copy.deepcopy(dict(patch)))
    return markers


def annotate_family(family: EntitySchema, schemas_dir: Path = SCHEMAS_DIR) -> list[AnnotatedSchema]:
    """Annotate one family, expanding it per category when it declares categories."""
    base_uri = (schemas_dir / family.schema_file).resolve().as_uri()
    if not family.categories:
        schema = _load_base(schemas_dir, family.schema_file)
        markers = _annotate(family, schema, {})
        return [AnnotatedSchema(family.name, family.file_match, base_uri, schema, markers)]

    results: list[AnnotatedSchema] = []
    stem = Path(family.schema_file).stem
    for category in family.categories:
        schema = _load_base(schemas_dir, family.schema_file)
        markers = _annotate(family, schema, {location: category for location in family.category_pointers})
        uri = (schemas_dir / f"{stem}-{category.value}.json").resolve().as_uri()
        file_match = family.file_match.format(category=category.value)
        results.append(AnnotatedSchema(f"{family.name}:{category.value}", file_match, uri, schema, markers))
    return results


def configure(
    families: tuple[EntitySchema, ...] = ENTITY_SCHEMAS, schemas_dir: Path = SCHEMAS_DIR
) -> list[AnnotatedSchema]:
    """Build the complete schema set, always starting from unannotated base schemas."""
    annotated: list[AnnotatedSchema] = []
    for family in families:
        annotated.extend(annotate_family(family, schemas_dir))
    logger.debug("Configured %d annotated schemas", len(annotated))
    return annotated


def schemas_for_document(schemas: list[AnnotatedSchema], uri: str) -> list[AnnotatedSchema]:
    return [schema for schema in schemas if schema.matches(uri)]
