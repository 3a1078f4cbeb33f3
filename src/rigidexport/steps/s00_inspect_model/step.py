"""Step 00: Inspect a source model before export.

Loads the model through the loader registry, fails early when it cannot be
read, and records what the export step will see: submesh and vertex counts
plus the texture roles each material carries.
"""

from __future__ import annotations

import json
import logging
from typing import ClassVar

from rigidexport.core.errors import SourceReadFailure
from rigidexport.core.step_base import BaseStep
from ._loaders import ExportSupport, export_support, load_model
from .config import InspectModelConfig
from .contracts import InspectModelInput, InspectModelOutput, MaterialSummary

logger = logging.getLogger(__name__)


class InspectModelStep(BaseStep[InspectModelInput, InspectModelOutput, InspectModelConfig]):
    name: ClassVar[str] = "inspect_model"
    input_type: ClassVar = InspectModelInput
    output_type: ClassVar = InspectModelOutput
    config_type: ClassVar = InspectModelConfig

    def validate_inputs(self, inputs: InspectModelInput) -> bool:
        if not inputs.source_path.exists():
            logger.error(f"Model file not found: {inputs.source_path}")
            return False
        if export_support(inputs.source_path) == ExportSupport.NOT_SUPPORTED:
            logger.error(f"No loader for '{inputs.source_path.suffix}' files")
            return False
        return True

    def run(self, inputs: InspectModelInput) -> InspectModelOutput:
        model = load_model(inputs.source_path)
        lod = model.first_lod

        num_faces = sum(s.triangle_count for s in lod)
        if num_faces == 0 and self.config.fail_on_empty:
            raise SourceReadFailure(inputs.source_path, "model has no triangles in its first LOD")

        materials = [
            MaterialSummary(name=m.name, roles=sorted(r.value for r in m.textures))
            for m in model.materials()
        ]
        output = InspectModelOutput(
            source_path=inputs.source_path,
            support=export_support(inputs.source_path).value,
            num_submeshes=len(lod),
            num_vertices=sum(s.vertex_count for s in lod),
            num_faces=num_faces,
            materials=materials,
        )

        for m in materials:
            logger.info(f"Material '{m.name}': {', '.join(m.roles) or 'no textures'}")

        if self.config.write_summary:
            output_dir = self.data_root / self.config.output_subdir
            output_dir.mkdir(parents=True, exist_ok=True)
            summary_path = output_dir / "model_summary.json"
            output.summary_path = summary_path
            with open(summary_path, "w", encoding="utf-8") as f:
                json.dump(output.model_dump(mode="json"), f, indent=2)
            logger.info(f"Saved model summary -> {summary_path}")

        return output
