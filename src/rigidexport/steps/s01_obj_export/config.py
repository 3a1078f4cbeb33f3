"""Configuration for Step 01: OBJ/MTL export."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class ObjExportConfig(BaseModel):
    output_subdir: str = Field(
        "processed", description="Output directory, relative to data_root unless absolute"
    )
    base_name: Optional[str] = Field(
        None, description="File stem for .obj/.mtl (default: model file stem)"
    )
    texture_root: Optional[Path] = Field(
        None, description="Directory that relative texture references resolve against"
    )
    export_textures: bool = Field(True, description="Derive and write texture maps")

    # Height map derivation
    height_strength: float = Field(
        1.0, ge=0.0, description="Deviation scale around mid grey (practical range 0..1)"
    )
    height_contrast: float = Field(
        0.0, ge=-1.0, le=1.0, description="Height contrast reshaping (0 = off)"
    )
    blur_radius: int = Field(0, ge=0, description="Box blur radius for height maps (0 = off)")

    normalize_images: bool = Field(True, description="Re-encode emitted PNGs as 32-bit RGBA")
    keep_intermediates: bool = Field(
        False, description="Keep *_mask.png / *_premult.png next to the final diffuse map"
    )
    strict_textures: bool = Field(
        False, description="Abort the export when a texture reference cannot be decoded"
    )
