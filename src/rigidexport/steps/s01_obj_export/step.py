"""Step 01: OBJ/MTL export with derived texture maps.

Writes into the output directory:
- <base>.obj: geometry of the model's first LOD, one object per submesh
- <base>.mtl: one material block per distinct material
- <material>_{normal,displacement,diffuse}.png: 32-bit RGBA texture maps
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from rigidexport.core.model import ExportContext, Model
from rigidexport.core.step_base import BaseStep
from rigidexport.steps.s00_inspect_model._loaders import (
    ExportSupport,
    export_support,
    load_model,
)
from ._orchestrator import ExportResult, export_model
from ._texture_decoder import FileTextureDecoder, TextureDecoder
from .config import ObjExportConfig
from .contracts import FailedTexture, ObjExportInput, ObjExportOutput

logger = logging.getLogger(__name__)


class ObjExportStep(BaseStep[ObjExportInput, ObjExportOutput, ObjExportConfig]):
    name: ClassVar[str] = "obj_export"
    input_type: ClassVar = ObjExportInput
    output_type: ClassVar = ObjExportOutput
    config_type: ClassVar = ObjExportConfig

    def __init__(self, config: ObjExportConfig, data_root: Path,
                 decoder: TextureDecoder | None = None):
        super().__init__(config, data_root)
        self.decoder = decoder

    def validate_inputs(self, inputs: ObjExportInput) -> bool:
        if not inputs.source_path.exists():
            logger.error(f"Model file not found: {inputs.source_path}")
            return False
        if export_support(inputs.source_path) == ExportSupport.NOT_SUPPORTED:
            logger.error(f"No loader for '{inputs.source_path.suffix}' files")
            return False
        return True

    @property
    def output_dir(self) -> Path:
        subdir = Path(self.config.output_subdir)
        return subdir if subdir.is_absolute() else self.data_root / subdir

    def export(self, model: Model, base_name: str | None = None,
               texture_root: Path | None = None) -> ExportResult:
        """Export an already loaded model."""
        decoder = self.decoder or FileTextureDecoder(texture_root or self.config.texture_root)
        ctx = ExportContext(
            output_dir=self.output_dir,
            base_name=base_name or self.config.base_name or model.name,
        )
        return export_model(model, ctx, decoder, self.config)

    def run(self, inputs: ObjExportInput) -> ObjExportOutput:
        source_path = inputs.source_path.resolve()
        model = load_model(source_path)
        texture_root = self.config.texture_root or source_path.parent
        result = self.export(
            model,
            base_name=self.config.base_name or source_path.stem,
            texture_root=texture_root,
        )

        return ObjExportOutput(
            obj_path=result.obj_path,
            mtl_path=result.mtl_path,
            num_submeshes=result.num_submeshes,
            num_materials=len(result.materials),
            num_vertices=result.num_vertices,
            num_faces=result.num_faces,
            textures=result.textures,
            failed_textures=[
                FailedTexture(material=o.material, role=o.role, ref=o.ref, error=o.error or "")
                for o in result.failed_textures
            ],
        )
