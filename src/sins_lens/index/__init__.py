from sins_lens.index.builders import IndexSet, UniformSource, rebuild_indices
from sins_lens.index.localization import LocalizationStore
from sins_lens.index.paths import PathIndex
from sins_lens.index.storage import CacheStorage, ExistenceCache, ManifestRoster, UniformSet
from sins_lens.index.textures import TexturePreview

__all__ = [
    "CacheStorage",
    "ExistenceCache",
    "IndexSet",
    "LocalizationStore",
    "ManifestRoster",
    "PathIndex",
    "TexturePreview",
    "UniformSet",
    "UniformSource",
    "rebuild_indices",
]
