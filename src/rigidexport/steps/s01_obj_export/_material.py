"""MTL material blocks and the texture maps they reference.

Per material:
- Normal map: written as-is, plus a height map derived from it (optionally
  blurred) -> `map_bump` / `disp`.
- Diffuse (or BaseColor): written as the diffuse map; when a Mask (or
  SkinMask) exists the colour is premultiplied by the mask first
  -> `map_Kd`, with `Kd` forced to white.
- Fixed Ka/Ks/Ns/illum constants.

Every texture step reports a TextureOutcome. A failed outcome drops that
texture's lines from the block and the export carries on.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from rigidexport.core.errors import (
    OutputWriteFailure,
    SourceReadFailure,
    TextureDerivationFailure,
    TextureReadError,
)
from rigidexport.core.model import ExportContext, MaterialRef, TextureRole
from rigidexport.core.pixels import PixelBuffer
from ._blur import box_blur
from ._compositor import premultiply
from ._geometry import material_name
from ._height import derive_height
from ._normalizer import normalize_image, write_png
from ._texture_decoder import TextureDecoder
from .config import ObjExportConfig

logger = logging.getLogger(__name__)

AMBIENT = "Ka 1.0 1.0 1.0"
DIFFUSE_UNTEXTURED = "Kd 0.8 0.8 0.8"
DIFFUSE_TEXTURED = "Kd 1.0 1.0 1.0"
SPECULAR = "Ks 0.5 0.5 0.5"
SHININESS = "Ns 32.0"
ILLUMINATION = "illum 2"


@dataclass(frozen=True)
class TextureOutcome:
    """Result of processing one texture slot of a material."""

    material: str
    role: str
    ref: str
    written: tuple[Path, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class MaterialBlock:
    name: str
    text: str
    outcomes: list[TextureOutcome] = field(default_factory=list)

    @property
    def written(self) -> list[Path]:
        return [p for o in self.outcomes if o.ok for p in o.written]

    @property
    def failures(self) -> list[TextureOutcome]:
        return [o for o in self.outcomes if not o.ok]


class _TextureWork:
    """Decode/write helpers bound to one material's export settings."""

    def __init__(self, material: MaterialRef, ctx: ExportContext,
                 decoder: TextureDecoder, config: ObjExportConfig):
        self.material = material
        self.ctx = ctx
        self.decoder = decoder
        self.config = config

    def decode(self, ref: str) -> PixelBuffer:
        try:
            return self.decoder.decode(ref)
        except TextureReadError as exc:
            if self.config.strict_textures:
                raise SourceReadFailure(ref, exc.reason) from exc
            raise

    def emit(self, buffer: PixelBuffer, role: str) -> Path:
        path = self.ctx.texture_path(self.material.name, role)
        write_png(buffer, path)
        if self.config.normalize_images:
            outcome = normalize_image(path)
            if not outcome.ok:
                logger.debug(f"{path.name} keeps its original encoding: {outcome.error}")
        return path

    def failed(self, role: TextureRole, ref: str, exc: Exception) -> TextureOutcome:
        logger.warning(f"Material '{self.material.name}': {role.value} texture skipped: {exc}")
        return TextureOutcome(self.material.name, role.value, ref, error=str(exc))


def _export_normal(work: _TextureWork, ref: str) -> TextureOutcome:
    cfg = work.config
    try:
        normal = work.decode(ref)
        height = derive_height(normal, strength=cfg.height_strength, contrast=cfg.height_contrast)
        if cfg.blur_radius > 0:
            height = box_blur(height, cfg.blur_radius)
        normal_path = work.emit(normal, "normal")
        height_path = work.emit(height, "displacement")
    except (TextureDerivationFailure, OutputWriteFailure, ValueError) as exc:
        return work.failed(TextureRole.NORMAL, ref, exc)
    return TextureOutcome(work.material.name, TextureRole.NORMAL.value, ref,
                          written=(normal_path, height_path))


def _premultiplied(work: _TextureWork, color: PixelBuffer, mask_ref: str) -> list[Path]:
    """Write mask and premultiplied intermediates, return their paths."""
    mask = work.decode(mask_ref)
    composite = premultiply(color, mask)
    return [work.emit(mask, "mask"), work.emit(composite, "premult")]


def _export_diffuse(work: _TextureWork, ref: str) -> list[TextureOutcome]:
    outcomes: list[TextureOutcome] = []
    diffuse_path = work.ctx.texture_path(work.material.name, "diffuse")
    try:
        color = work.decode(ref)
    except TextureDerivationFailure as exc:
        return [work.failed(TextureRole.DIFFUSE, ref, exc)]

    mask_ref = work.material.mask_texture()
    premult_path = None
    if mask_ref:
        try:
            mask_path, premult_path = _premultiplied(work, color, mask_ref)
        except (TextureDerivationFailure, OutputWriteFailure, ValueError) as exc:
            outcomes.append(work.failed(TextureRole.MASK, mask_ref, exc))
            if not work.config.keep_intermediates:
                for role in ("mask", "premult"):
                    _discard(work.ctx.texture_path(work.material.name, role))
        else:
            kept = (mask_path, premult_path) if work.config.keep_intermediates else ()
            outcomes.append(TextureOutcome(work.material.name, TextureRole.MASK.value,
                                           mask_ref, written=kept))

    try:
        if premult_path is None:
            work.emit(color, "diffuse")
        elif work.config.keep_intermediates:
            shutil.copyfile(premult_path, diffuse_path)
        else:
            premult_path.replace(diffuse_path)
            _discard(work.ctx.texture_path(work.material.name, "mask"))
    except (OutputWriteFailure, OSError) as exc:
        outcomes.append(work.failed(TextureRole.DIFFUSE, ref, exc))
        return outcomes

    outcomes.append(TextureOutcome(work.material.name, TextureRole.DIFFUSE.value, ref,
                                   written=(diffuse_path,)))
    return outcomes


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.debug(f"Could not remove intermediate {path.name}: {exc}")


def export_material(
    material: MaterialRef,
    ctx: ExportContext,
    decoder: TextureDecoder,
    config: ObjExportConfig,
) -> MaterialBlock:
    """Derive the material's textures and build its MTL block.

    Raises:
        SourceReadFailure: only with `strict_textures`, when a texture
            reference cannot be decoded.
    """
    work = _TextureWork(material, ctx, decoder, config)
    outcomes: list[TextureOutcome] = []

    normal_ref = material.normal_texture()
    diffuse_ref = material.diffuse_texture()
    if config.export_textures:
        if normal_ref:
            outcomes.append(_export_normal(work, normal_ref))
        if diffuse_ref:
            outcomes.extend(_export_diffuse(work, diffuse_ref))

    maps: list[str] = []
    has_diffuse = False
    for outcome in outcomes:
        if not outcome.ok:
            continue
        match TextureRole(outcome.role):
            case TextureRole.NORMAL:
                maps.append(f"map_bump {ctx.texture_path(material.name, 'normal').name}")
                maps.append(f"disp {ctx.texture_path(material.name, 'displacement').name}")
            case TextureRole.DIFFUSE:
                maps.append(f"map_Kd {ctx.texture_path(material.name, 'diffuse').name}")
                has_diffuse = True
            case _:
                pass

    lines = [
        f"newmtl {material_name(material.name)}",
        AMBIENT,
        DIFFUSE_TEXTURED if has_diffuse else DIFFUSE_UNTEXTURED,
        SPECULAR,
        SHININESS,
        ILLUMINATION,
        *maps,
        "",
    ]
    block = MaterialBlock(name=material.name, text="\n".join(lines) + "\n", outcomes=outcomes)
    logger.debug(
        f"Material '{material.name}': {len(block.written)} images, "
        f"{len(block.failures)} failed textures"
    )
    return block


def write_mtl_header(model_name: str) -> str:
    return f"# MTL file exported by rigidexport\n# Model: {model_name}\n\n"
