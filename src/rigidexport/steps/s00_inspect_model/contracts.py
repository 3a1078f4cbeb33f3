"""I/O contracts for Step 00: Inspect source model."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class InspectModelInput(BaseModel):
    source_path: Path = Field(..., description="Path to the source model file")


class MaterialSummary(BaseModel):
    name: str
    roles: list[str] = Field(default_factory=list, description="Texture roles present")


class InspectModelOutput(BaseModel):
    source_path: Path = Field(..., description="Model path, passed on to the export step")
    summary_path: Optional[Path] = Field(None, description="Path to model_summary.json")
    support: str = Field(..., description="Export support level for the file type")
    num_submeshes: int = Field(0, description="Submeshes in the first LOD")
    num_vertices: int = Field(0, description="Vertices in the first LOD")
    num_faces: int = Field(0, description="Triangles in the first LOD")
    materials: list[MaterialSummary] = Field(default_factory=list)
