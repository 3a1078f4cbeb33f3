"""In-memory model handed to the exporter by a model loader.

A Model is a list of LODs, each LOD a list of Submeshes. Only the first LOD
is exported. Submeshes own their vertex attribute arrays and a reference to
their material; none of it is mutated during export.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import NamedTuple, Sequence

import numpy as np


class TextureRole(str, Enum):
    DIFFUSE = "diffuse"
    BASE_COLOR = "base_color"
    NORMAL = "normal"
    MASK = "mask"
    SKIN_MASK = "skin_mask"
    SPECULAR = "specular"
    GLOSS = "gloss"


class Vertex(NamedTuple):
    position: tuple[float, float, float]
    normal: tuple[float, float, float]
    uv: tuple[float, float]


@dataclass(frozen=True)
class MaterialRef:
    """Named material with at most one texture reference per role."""

    name: str
    textures: dict[TextureRole, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        textures = {TextureRole(role): str(ref) for role, ref in self.textures.items() if ref}
        object.__setattr__(self, "textures", textures)

    def texture(self, role: TextureRole) -> str | None:
        return self.textures.get(role)

    def diffuse_texture(self) -> str | None:
        """Diffuse wins over BaseColor when both are present."""
        return self.texture(TextureRole.DIFFUSE) or self.texture(TextureRole.BASE_COLOR)

    def mask_texture(self) -> str | None:
        return self.texture(TextureRole.MASK) or self.texture(TextureRole.SKIN_MASK)

    def normal_texture(self) -> str | None:
        return self.texture(TextureRole.NORMAL)


@dataclass(frozen=True, eq=False)
class Submesh:
    """One material-homogeneous triangle group."""

    name: str
    positions: np.ndarray  # (N, 3) float32
    normals: np.ndarray  # (N, 3) float32
    uvs: np.ndarray  # (N, 2) float32
    indices: np.ndarray  # (3 * F,) uint32
    material: MaterialRef

    def __post_init__(self) -> None:
        positions = _as_array(self.positions, np.float32, (-1, 3), "positions")
        n = len(positions)
        normals = _as_array(self.normals, np.float32, (-1, 3), "normals")
        uvs = _as_array(self.uvs, np.float32, (-1, 2), "uvs")
        if len(normals) != n or len(uvs) != n:
            raise ValueError(
                f"Submesh '{self.name}': attribute counts differ "
                f"(positions={n}, normals={len(normals)}, uvs={len(uvs)})"
            )

        raw_indices = np.asarray(self.indices).reshape(-1)
        if raw_indices.size and raw_indices.min() < 0:
            raise ValueError(f"Submesh '{self.name}': negative vertex index")
        indices = raw_indices.astype(np.uint32)
        if len(indices) % 3 != 0:
            raise ValueError(
                f"Submesh '{self.name}': index count {len(indices)} is not a multiple of 3"
            )
        if indices.size and int(indices.max()) >= n:
            raise ValueError(
                f"Submesh '{self.name}': index {int(indices.max())} out of range for {n} vertices"
            )

        for attr, arr in (("positions", positions), ("normals", normals),
                          ("uvs", uvs), ("indices", indices)):
            arr.setflags(write=False)
            object.__setattr__(self, attr, arr)

    @classmethod
    def from_vertices(
        cls,
        name: str,
        vertices: Sequence[Vertex],
        indices: Sequence[int],
        material: MaterialRef,
    ) -> Submesh:
        return cls(
            name=name,
            positions=np.array([v.position for v in vertices], dtype=np.float32).reshape(-1, 3),
            normals=np.array([v.normal for v in vertices], dtype=np.float32).reshape(-1, 3),
            uvs=np.array([v.uv for v in vertices], dtype=np.float32).reshape(-1, 2),
            indices=np.array(indices, dtype=np.int64),
            material=material,
        )

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3


@dataclass(frozen=True)
class Model:
    name: str
    lods: list[list[Submesh]] = field(default_factory=list)

    @property
    def first_lod(self) -> list[Submesh]:
        return self.lods[0] if self.lods else []

    def materials(self) -> list[MaterialRef]:
        """Unique materials of the first LOD in first-use order."""
        seen: dict[str, MaterialRef] = {}
        for submesh in self.first_lod:
            seen.setdefault(submesh.material.name, submesh.material)
        return list(seen.values())


@dataclass(frozen=True)
class ExportContext:
    """Per-invocation export settings plus the running vertex offset.

    The offset only moves forward: `advanced` returns a new context and the
    caller threads it through the submesh loop.
    """

    output_dir: Path
    base_name: str
    vertex_offset: int = 0

    def advanced(self, vertices_written: int) -> ExportContext:
        if vertices_written < 0:
            raise ValueError(f"Vertex offset cannot move backwards ({vertices_written})")
        return replace(self, vertex_offset=self.vertex_offset + vertices_written)

    @property
    def obj_path(self) -> Path:
        return self.output_dir / f"{self.base_name}.obj"

    @property
    def mtl_path(self) -> Path:
        return self.output_dir / f"{self.base_name}.mtl"

    def texture_path(self, name: str, role: str) -> Path:
        return self.output_dir / f"{safe_name(name)}_{role}.png"


def safe_name(name: str) -> str:
    """Name with whitespace runs replaced by '_', usable as an OBJ/MTL token."""
    return "_".join(str(name).split()) or "_"


def _as_array(data, dtype, shape: tuple[int, int], label: str) -> np.ndarray:
    arr = np.array(data, dtype=dtype, copy=True)
    if arr.size == 0:
        return arr.reshape(0, shape[1])
    if arr.ndim != 2 or arr.shape[1] != shape[1]:
        raise ValueError(f"{label} must have shape (N, {shape[1]}), got {arr.shape}")
    return arr
