"""rigidexport core: pipeline runner, base step, data model, shared contracts."""

from .step_base import BaseStep
from .contracts import PipelineConfig, StepEntry, StepMeta
from .errors import (
    ExportError,
    ImageNormalizationFailure,
    OutputWriteFailure,
    SourceReadFailure,
    TextureDerivationFailure,
    TextureReadError,
)
from .model import ExportContext, MaterialRef, Model, Submesh, TextureRole, Vertex
from .pixels import PixelBuffer
from .pipeline_runner import run_pipeline, load_pipeline_config
from .logging import setup_logging

__all__ = [
    "BaseStep",
    "PipelineConfig",
    "StepEntry",
    "StepMeta",
    "ExportError",
    "ImageNormalizationFailure",
    "OutputWriteFailure",
    "SourceReadFailure",
    "TextureDerivationFailure",
    "TextureReadError",
    "ExportContext",
    "MaterialRef",
    "Model",
    "Submesh",
    "TextureRole",
    "Vertex",
    "PixelBuffer",
    "run_pipeline",
    "load_pipeline_config",
    "setup_logging",
]
