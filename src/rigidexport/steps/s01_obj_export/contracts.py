"""I/O contracts for Step 01: OBJ/MTL export."""

from pathlib import Path

from pydantic import BaseModel, Field


class ObjExportInput(BaseModel):
    source_path: Path = Field(..., description="Path to the source model file")


class FailedTexture(BaseModel):
    material: str
    role: str
    ref: str
    error: str


class ObjExportOutput(BaseModel):
    obj_path: Path = Field(..., description="Path to the exported .obj file")
    mtl_path: Path = Field(..., description="Path to the exported .mtl file")
    num_submeshes: int = Field(0, description="Number of submeshes written")
    num_materials: int = Field(0, description="Number of material blocks written")
    num_vertices: int = Field(0, description="Total vertex count across all submeshes")
    num_faces: int = Field(0, description="Total triangle count across all submeshes")
    textures: list[Path] = Field(default_factory=list, description="Image files written")
    failed_textures: list[FailedTexture] = Field(
        default_factory=list, description="Textures omitted because processing failed"
    )
