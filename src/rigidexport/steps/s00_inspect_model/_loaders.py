"""Model loaders: file path in, in-memory Model out.

Loaders are looked up by file suffix. Game-format parsers (RigidModel v2
and friends) register themselves through `register_loader`; interchange
formats trimesh can read are available out of the box. Texture references
for those come from an optional `<stem>.materials.yaml` next to the model:

    materials:
      body:
        diffuse: textures/body_d.png
        normal: textures/body_n.png
        mask: textures/body_m.png
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Protocol

import numpy as np
import yaml
from pydantic import BaseModel, Field, ValidationError

from rigidexport.core.errors import SourceReadFailure
from rigidexport.core.model import MaterialRef, Model, Submesh, TextureRole

logger = logging.getLogger(__name__)

RIGID_MODEL_SUFFIXES = (".rigidmodel", ".rigid_model_v2", ".rmv2")
TRIMESH_SUFFIXES = (".obj", ".glb", ".gltf", ".ply", ".stl", ".off")
MANIFEST_SUFFIX = ".materials.yaml"


class ExportSupport(str, Enum):
    HIGH_PRIORITY = "high_priority"
    SUPPORTED = "supported"
    NOT_SUPPORTED = "not_supported"


class ModelLoader(Protocol):
    def load(self, path: Path) -> Model:
        ...


_REGISTRY: dict[str, tuple[ModelLoader, ExportSupport]] = {}


def register_loader(
    suffixes: tuple[str, ...] | list[str],
    loader: ModelLoader,
    support: ExportSupport | None = None,
) -> None:
    """Register `loader` for the given file suffixes (case-insensitive).

    Game model formats default to HIGH_PRIORITY, everything else to SUPPORTED.
    """
    for suffix in suffixes:
        key = suffix.lower()
        level = support or (
            ExportSupport.HIGH_PRIORITY if key in RIGID_MODEL_SUFFIXES else ExportSupport.SUPPORTED
        )
        _REGISTRY[key] = (loader, level)


def unregister_loader(suffixes: tuple[str, ...] | list[str]) -> None:
    for suffix in suffixes:
        _REGISTRY.pop(suffix.lower(), None)


def export_support(path: Path | str) -> ExportSupport:
    entry = _REGISTRY.get(Path(path).suffix.lower())
    return entry[1] if entry else ExportSupport.NOT_SUPPORTED


def get_loader(path: Path | str) -> ModelLoader:
    entry = _REGISTRY.get(Path(path).suffix.lower())
    if entry is None:
        raise SourceReadFailure(path, f"no loader registered for '{Path(path).suffix}' files")
    return entry[0]


def load_model(path: Path | str) -> Model:
    """Load a model through the registry.

    Raises:
        SourceReadFailure: missing file, unknown format, or loader error.
    """
    path = Path(path)
    if not path.is_file():
        raise SourceReadFailure(path, "file not found")
    loader = get_loader(path)
    try:
        model = loader.load(path)
    except SourceReadFailure:
        raise
    except (OSError, ValueError, KeyError, IndexError) as exc:
        raise SourceReadFailure(path, str(exc)) from exc
    logger.info(
        f"Loaded {path.name}: {len(model.first_lod)} submeshes, "
        f"{len(model.materials())} materials"
    )
    return model


# ── Material manifest ────────────────────────────────────────────────

class MaterialManifest(BaseModel):
    materials: dict[str, dict[TextureRole, str]] = Field(default_factory=dict)


def manifest_path_for(model_path: Path) -> Path:
    return model_path.with_name(model_path.stem + MANIFEST_SUFFIX)


def read_material_manifest(model_path: Path) -> dict[str, dict[TextureRole, str]]:
    """Texture references per material name, resolved against the manifest dir."""
    manifest_file = manifest_path_for(model_path)
    if not manifest_file.exists():
        return {}
    try:
        with open(manifest_file, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise SourceReadFailure(manifest_file, f"malformed material manifest: {exc}") from exc
    if not isinstance(raw, dict):
        raise SourceReadFailure(
            manifest_file, f"material manifest must be a mapping, got {type(raw).__name__}"
        )
    try:
        manifest = MaterialManifest(**raw)
    except ValidationError as exc:
        raise SourceReadFailure(manifest_file, f"invalid material manifest: {exc}") from exc

    base = manifest_file.parent.resolve()
    return {
        name: {
            role: str(ref if Path(ref).is_absolute() else base / ref)
            for role, ref in slots.items()
        }
        for name, slots in manifest.materials.items()
    }


# ── trimesh loader ───────────────────────────────────────────────────

def _visual_material_name(geom, fallback: str) -> str:
    material = getattr(geom.visual, "material", None)
    name = getattr(material, "name", None)
    return str(name) if name else fallback


def _transformed_normals(normals: np.ndarray, transform: np.ndarray) -> np.ndarray:
    """Rotate normals by the inverse transpose of the node transform and re-unitize."""
    import trimesh

    linear = np.asarray(transform, dtype=np.float64)[:3, :3]
    rotated = np.asarray(normals, dtype=np.float64) @ np.linalg.inv(linear)
    return trimesh.util.unitize(rotated)


def _visual_uvs(geom) -> np.ndarray:
    uv = getattr(geom.visual, "uv", None)
    if uv is None or len(uv) != len(geom.vertices):
        return np.zeros((len(geom.vertices), 2), dtype=np.float32)
    return np.asarray(uv, dtype=np.float32)


class TrimeshLoader:
    """Load interchange formats; one submesh per scene geometry instance."""

    def load(self, path: Path) -> Model:
        import trimesh

        scene = trimesh.load(str(path), force="scene", process=False)
        textures = read_material_manifest(path)

        submeshes: list[Submesh] = []
        for node_name in scene.graph.nodes_geometry:
            transform, geom_name = scene.graph[node_name]
            geom = scene.geometry[geom_name]
            if not isinstance(geom, trimesh.Trimesh) or len(geom.faces) == 0:
                logger.debug(f"Skipping non-triangle geometry '{geom_name}'")
                continue

            # Authored vertex normals live in the geometry cache; transform
            # them directly rather than letting a copy recompute them
            material = _visual_material_name(geom, geom_name)
            submeshes.append(Submesh(
                name=str(node_name),
                positions=trimesh.transform_points(geom.vertices, transform),
                normals=_transformed_normals(geom.vertex_normals, transform),
                uvs=_visual_uvs(geom),
                indices=np.asarray(geom.faces, dtype=np.int64).reshape(-1),
                material=MaterialRef(material, textures.get(material, {})),
            ))

        unused = set(textures) - {s.material.name for s in submeshes}
        for name in sorted(unused):
            logger.warning(f"Manifest material '{name}' is not used by any submesh")

        return Model(name=path.stem, lods=[submeshes])


register_loader(TRIMESH_SUFFIXES, TrimeshLoader())
