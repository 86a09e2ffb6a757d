"""Workspace scans that populate the identifier indices.

The workspace is walked once; each builder then reads from its own bucket of
files and owns the structure it writes, so all of them run concurrently. The
blocking walk and file reads happen in worker threads.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from sins_lens.core.entities import LOCALIZED_TEXT_SUFFIX, file_backed_categories, is_json_document, keeps_extension
from sins_lens.core.pointers import MANIFEST_CATEGORIES, PointerType
from sins_lens.index.localization import LocalizationStore
from sins_lens.index.paths import PathIndex
from sins_lens.index.storage import ExistenceCache, ManifestRoster, UniformSet
from sins_lens.index.textures import TexturePreview
from sins_lens.index.workspace import WorkspaceFiles, read_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UniformSource:
    """Identifiers declared inside a singleton ``*.uniforms`` file."""

    category: PointerType
    file_name: str
    collection: str
    field: str


UNIFORM_SOURCES: tuple[UniformSource, ...] = (
    UniformSource(PointerType.WEAPON_TAG, "weapon.uniforms", "weapon_tags", "name"),
)


@dataclass
class IndexSet:
    existence: ExistenceCache = field(default_factory=ExistenceCache)
    manifests: ManifestRoster = field(default_factory=ManifestRoster)
    uniforms: UniformSet = field(default_factory=UniformSet)
    paths: PathIndex = field(default_factory=PathIndex)
    localization: LocalizationStore = field(default_factory=LocalizationStore)
    textures: TexturePreview = field(default_factory=TexturePreview)
    language: str = "en"

    def lookup(self, category: PointerType) -> frozenset[str] | None:
        """Identifier set backing ``category``, or ``None`` when nothing indexes it."""
        if any(source.category is category for source in UNIFORM_SOURCES):
            return self.uniforms.get(category)
        if category is PointerType.LOCALIZED_TEXT or category in file_backed_categories():
            return self.existence.get(category)
        return None

    def contains(self, category: PointerType, identifier: str) -> bool:
        if any(source.category is category for source in UNIFORM_SOURCES):
            return self.uniforms.has(category, identifier)
        return self.existence.has(category, identifier)

    def summary(self) -> dict[str, int]:
        counts = {category.value: len(self.existence.get(category)) for category in self.existence.categories()}
        counts.update({f"{c.value} (uniform)": len(self.uniforms.get(c)) for c in self.uniforms.categories()})
        counts.update({f"{c.value} (manifest)": len(self.manifests.get(c)) for c in self.manifests.categories()})
        counts["paths"] = len(self.paths)
        counts["localization keys"] = len(self.localization)
        counts["textures"] = len(self.textures)
        return counts


def _existence_identifiers(files: list[Path], with_extension: bool) -> set[str]:
    identifiers: set[str] = set()
    for path in files:
        identifiers.add(path.stem.lower())
        if with_extension:
            identifiers.add(path.name.lower())
    return identifiers


async def build_existence(files: WorkspaceFiles, cache: ExistenceCache, language: str) -> None:
    for category, suffix in file_backed_categories().items():
        cache.set(category, _existence_identifiers(files.with_suffix(suffix), keeps_extension(category)))

    keys: set[str] = set()
    localized = files.named(f"{language}{LOCALIZED_TEXT_SUFFIX}")
    if not localized:
        logger.warning("No %s%s found in the workspace", language, LOCALIZED_TEXT_SUFFIX)
    else:
        content = await asyncio.to_thread(read_json, localized[0])
        if isinstance(content, dict):
            keys.update(content)
    cache.set(PointerType.LOCALIZED_TEXT, keys)


async def build_manifests(files: WorkspaceFiles, roster: ManifestRoster) -> None:
    async def load(category: PointerType) -> None:
        ids: set[str] = set()
        for path in files.named(f"{category.value}.entity_manifest"):
            content = await asyncio.to_thread(read_json, path)
            if isinstance(content, dict) and isinstance(content.get("ids"), list):
                ids.update(i for i in content["ids"] if isinstance(i, str))
        roster.set(category, ids)

    await asyncio.gather(*(load(category) for category in MANIFEST_CATEGORIES))


async def build_uniforms(files: WorkspaceFiles, uniforms: UniformSet) -> None:
    for source in UNIFORM_SOURCES:
        found = files.named(source.file_name)
        names: set[str] = set()
        if found:
            content = await asyncio.to_thread(read_json, found[0])
            entries = content.get(source.collection) if isinstance(content, dict) else None
            for entry in entries if isinstance(entries, list) else []:
                if isinstance(entry, dict) and isinstance(entry.get(source.field), str) and entry[source.field]:
                    names.add(entry[source.field])
        else:
            logger.warning("No %s found in the workspace", source.file_name)
        uniforms.set(source.category, names)


async def build_paths(files: WorkspaceFiles, index: PathIndex) -> None:
    index.replace(files.matching(is_json_document))


async def build_localization(files: WorkspaceFiles, store: LocalizationStore) -> None:
    languages: dict[str, dict[str, str]] = {}
    for path in files.with_suffix(LOCALIZED_TEXT_SUFFIX):
        content = await asyncio.to_thread(read_json, path)
        if not isinstance(content, dict):
            continue
        entries = languages.setdefault(path.name.split(".")[0], {})
        entries.update({key: value for key, value in content.items() if isinstance(value, str)})
    store.replace(languages)


async def build_textures(files: WorkspaceFiles, preview: TexturePreview) -> None:
    preview.replace(files.with_suffix(".png"))


async def rebuild_indices(root: Path, language: str = "en") -> IndexSet:
    """Build a fresh :class:`IndexSet` for ``root``; previous indices are never patched."""
    indices = IndexSet(language=language)
    started = time.perf_counter()
    files = await asyncio.to_thread(WorkspaceFiles.scan, root)
    logger.debug("Found %d files under %s", len(files), root)
    await asyncio.gather(
        build_existence(files, indices.existence, language),
        build_manifests(files, indices.manifests),
        build_uniforms(files, indices.uniforms),
        build_paths(files, indices.paths),
        build_localization(files, indices.localization),
        build_textures(files, indices.textures),
    )
    logger.info(
        "Indexed %d unique IDs in '%s' (%.2fs)", len(indices.paths), root, time.perf_counter() - started
    )
    return indices
