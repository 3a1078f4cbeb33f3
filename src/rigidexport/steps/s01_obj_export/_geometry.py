"""Wavefront OBJ text for submeshes.

Face indices are global across the file: the caller passes the number of
vertices already written and advances it by `vertices_written` afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from rigidexport.core.model import safe_name

MATERIAL_SUFFIX = "_Material"


@dataclass(frozen=True)
class GeometryBlock:
    text: str
    vertices_written: int
    triangles_written: int


def format_float(value) -> str:
    """Shortest decimal that round-trips the float32 value, '.' separator."""
    return np.format_float_positional(np.float32(value), trim="-")


def material_name(name: str) -> str:
    return f"{safe_name(name)}{MATERIAL_SUFFIX}"


def _vector_lines(prefix: str, rows: np.ndarray) -> list[str]:
    return [f"{prefix} " + " ".join(format_float(c) for c in row) for row in rows]


def write_obj_header(model_name: str, mtl_file: str | None) -> str:
    lines = [
        "# OBJ file exported by rigidexport",
        f"# Model: {model_name}",
    ]
    if mtl_file:
        lines.append(f"mtllib {mtl_file}")
    lines.append("")
    return "\n".join(lines) + "\n"


def emit_submesh(submesh, vertex_offset: int, index: int = 0) -> GeometryBlock:
    """Serialize one submesh.

    Args:
        submesh: Submesh to write.
        vertex_offset: Vertices written by all previous submeshes.
        index: Position of the submesh in the LOD, used in the comment line.

    Returns:
        GeometryBlock with the text and how far to advance the offset.
    """
    if vertex_offset < 0:
        raise ValueError(f"vertex_offset must be >= 0, got {vertex_offset}")

    lines = [
        f"# Mesh {index}",
        f"o {safe_name(submesh.name)}",
        f"usemtl {material_name(submesh.material.name)}",
        "",
    ]

    lines += _vector_lines("v", submesh.positions)
    lines.append("")
    lines += _vector_lines("vn", submesh.normals)
    lines.append("")

    # OBJ texture space has V pointing the other way
    flipped = submesh.uvs.copy()
    flipped[:, 1] = np.float32(1.0) - flipped[:, 1]
    lines += _vector_lines("vt", flipped)
    lines.append("")

    faces = submesh.indices.astype(np.int64).reshape(-1, 3) + vertex_offset + 1
    for a, b, c in faces:
        lines.append(f"f {a}/{a}/{a} {b}/{b}/{b} {c}/{c}/{c}")
    lines.append("")

    return GeometryBlock(
        text="\n".join(lines) + "\n",
        vertices_written=submesh.vertex_count,
        triangles_written=len(faces),
    )
