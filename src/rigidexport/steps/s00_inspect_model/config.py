"""Configuration for Step 00: Inspect source model."""

from pydantic import BaseModel, Field


class InspectModelConfig(BaseModel):
    write_summary: bool = Field(True, description="Write model_summary.json")
    output_subdir: str = Field(
        "interim/s00_inspect_model", description="Summary directory, relative to data_root"
    )
    fail_on_empty: bool = Field(True, description="Treat a model without triangles as unreadable")
