"""Drives geometry and material export over a model's first LOD."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from rigidexport.core.errors import ExportError, OutputWriteFailure
from rigidexport.core.model import ExportContext, Model
from ._geometry import emit_submesh, write_obj_header
from ._material import MaterialBlock, TextureOutcome, export_material, write_mtl_header
from ._texture_decoder import TextureDecoder
from .config import ObjExportConfig

logger = logging.getLogger(__name__)


class ExportState(str, Enum):
    INIT = "init"
    EMITTING = "emitting"
    FLUSHING_GEOMETRY = "flushing_geometry"
    FLUSHING_MATERIALS = "flushing_materials"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ExportResult:
    obj_path: Path
    mtl_path: Path
    state: ExportState = ExportState.INIT
    num_submeshes: int = 0
    num_vertices: int = 0
    num_faces: int = 0
    materials: list[MaterialBlock] = field(default_factory=list)
    offsets: list[int] = field(default_factory=list)

    @property
    def textures(self) -> list[Path]:
        return [p for m in self.materials for p in m.written]

    @property
    def failed_textures(self) -> list[TextureOutcome]:
        return [o for m in self.materials for o in m.failures]


def _write_text(path: Path, text: str) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
    except OSError as exc:
        raise OutputWriteFailure(path, exc.strerror or str(exc)) from exc


def _transition(result: ExportResult, state: ExportState) -> None:
    logger.debug(f"Export state: {result.state.value} -> {state.value}")
    result.state = state


def export_model(
    model: Model,
    ctx: ExportContext,
    decoder: TextureDecoder,
    config: ObjExportConfig,
) -> ExportResult:
    """Write `<base>.obj`, `<base>.mtl` and texture PNGs for the model.

    `result.offsets[i]` records the vertex offset in effect after submesh i,
    i.e. the number of vertices written so far.

    Raises:
        OutputWriteFailure: output directory or files not writable.
        SourceReadFailure: strict texture mode and a texture is unreadable.
    """
    result = ExportResult(obj_path=ctx.obj_path, mtl_path=ctx.mtl_path)
    try:
        try:
            ctx.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputWriteFailure(ctx.output_dir, exc.strerror or str(exc)) from exc

        _transition(result, ExportState.EMITTING)
        obj_parts = [write_obj_header(model.name, ctx.mtl_path.name)]
        blocks: dict[str, MaterialBlock] = {}

        for i, submesh in enumerate(model.first_lod):
            block = emit_submesh(submesh, ctx.vertex_offset, index=i)
            obj_parts.append(block.text)
            ctx = ctx.advanced(block.vertices_written)
            result.offsets.append(ctx.vertex_offset)
            result.num_vertices += block.vertices_written
            result.num_faces += block.triangles_written
            result.num_submeshes += 1

            material = submesh.material
            if material.name not in blocks:
                blocks[material.name] = export_material(material, ctx, decoder, config)
            else:
                logger.debug(f"Material '{material.name}' already exported, reusing block")

        result.materials = list(blocks.values())

        _transition(result, ExportState.FLUSHING_GEOMETRY)
        _write_text(ctx.obj_path, "".join(obj_parts))

        _transition(result, ExportState.FLUSHING_MATERIALS)
        mtl_text = write_mtl_header(model.name) + "".join(b.text for b in result.materials)
        _write_text(ctx.mtl_path, mtl_text)
    except ExportError:
        _transition(result, ExportState.FAILED)
        raise

    _transition(result, ExportState.DONE)
    logger.info(
        f"Exported {result.num_submeshes} submeshes ({result.num_vertices} vertices, "
        f"{result.num_faces} faces) -> {ctx.obj_path.name}, "
        f"{len(result.materials)} materials -> {ctx.mtl_path.name}"
    )
    if result.failed_textures:
        logger.warning(f"{len(result.failed_textures)} textures were omitted")
    return result
