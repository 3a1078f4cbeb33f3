"""CLI entry point for the rigidexport pipeline.

Usage:
    rigidexport run                          # Run full pipeline
    rigidexport run-step obj_export -i '{"source_path": "model.glb"}'
    rigidexport info                         # Show pipeline info
    rigidexport export model.glb -o out/     # One-off export
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from rigidexport.core.logging import setup_logging

app = typer.Typer(name="rigidexport", help="Rigid mesh to OBJ/MTL export pipeline")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


@app.command()
def run(
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Run the full pipeline."""
    setup_logging(log_level)
    from rigidexport.core.errors import ExportError
    from rigidexport.core.pipeline_runner import run_pipeline

    try:
        run_pipeline(config)
    except ExportError as exc:
        console.print(f"[red]Export failed:[/red] {exc}")
        raise typer.Exit(1)


@app.command()
def run_step(
    step_name: str = typer.Argument(..., help="Step name (e.g. obj_export)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    input_json: str = typer.Option(None, "--input", "-i", help="Input as JSON string"),
) -> None:
    """Run a single pipeline step."""
    import json

    setup_logging()
    from rigidexport.core.pipeline_runner import load_pipeline_config, import_step_class, load_step_config

    pipeline_cfg = load_pipeline_config(config)
    entry = next((s for s in pipeline_cfg.steps if s.name == step_name), None)
    if entry is None:
        console.print(f"[red]Step '{step_name}' not found in pipeline config[/red]")
        raise typer.Exit(1)

    step_cls = import_step_class(entry.module)
    step_config_path = Path(entry.config_file)
    if not step_config_path.is_absolute() and not step_config_path.exists():
        step_config_path = config.parent / step_config_path
    step_config = load_step_config(step_config_path, step_cls.config_type)
    step_instance = step_cls(config=step_config, data_root=pipeline_cfg.data_root)

    if input_json:
        input_data = json.loads(input_json)
    elif entry.inputs:
        input_data = dict(entry.inputs)
    else:
        schema = step_cls.input_type.model_json_schema()
        required = schema.get("required", [])
        if required:
            console.print(f"[yellow]Step '{step_name}' requires input fields: {required}[/yellow]")
            console.print("[yellow]Use --input/-i with JSON string, e.g.:[/yellow]")
            console.print(f'  rigidexport run-step {step_name} -i \'{{"field": "value"}}\'')
            raise typer.Exit(1)
        input_data = {}

    console.print(f"[green]Running step: {step_name}[/green]")
    step_input = step_cls.input_type(**input_data)
    output = step_instance.execute(step_input)
    console.print(f"[green]Done. Output:[/green] {output.model_dump_json(indent=2)}")


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps and their status."""
    from rigidexport.core.pipeline_runner import load_pipeline_config

    pipeline_cfg = load_pipeline_config(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Enabled", style="yellow")
    table.add_column("Depends On", style="dim")

    for i, step in enumerate(pipeline_cfg.steps, 1):
        table.add_row(
            str(i),
            step.name,
            step.module,
            "Y" if step.enabled else "N",
            ", ".join(step.depends_on) if step.depends_on else "-",
        )
    console.print(table)


@app.command()
def export(
    model: Path = typer.Argument(..., help="Source model file"),
    output_dir: Path = typer.Option(Path("."), "--output-dir", "-o", help="Output directory"),
    base_name: Optional[str] = typer.Option(None, help="File stem for .obj/.mtl"),
    texture_root: Optional[Path] = typer.Option(None, help="Root for relative texture paths"),
    strength: float = typer.Option(1.0, help="Height map strength"),
    contrast: float = typer.Option(0.0, help="Height map contrast (-1..1)"),
    blur_radius: int = typer.Option(0, help="Height map box blur radius"),
    no_textures: bool = typer.Option(False, "--no-textures", help="Skip texture export"),
    strict: bool = typer.Option(False, help="Abort when a texture cannot be read"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Export one model to OBJ + MTL + PNG textures."""
    setup_logging(log_level)
    from rigidexport.core.errors import ExportError
    from rigidexport.steps.s01_obj_export.config import ObjExportConfig
    from rigidexport.steps.s01_obj_export.contracts import ObjExportInput
    from rigidexport.steps.s01_obj_export.step import ObjExportStep

    cfg = ObjExportConfig(
        output_subdir=str(output_dir.resolve()),
        base_name=base_name,
        texture_root=texture_root,
        height_strength=strength,
        height_contrast=contrast,
        blur_radius=blur_radius,
        export_textures=not no_textures,
        strict_textures=strict,
    )
    step = ObjExportStep(config=cfg, data_root=output_dir)
    try:
        output = step.execute(ObjExportInput(source_path=model))
    except (ExportError, ValueError) as exc:
        console.print(f"[red]Export failed:[/red] {exc}")
        raise typer.Exit(1)

    table = Table(title=f"Exported {model.name}")
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("OBJ", str(output.obj_path))
    table.add_row("MTL", str(output.mtl_path))
    table.add_row("Submeshes", str(output.num_submeshes))
    table.add_row("Vertices", str(output.num_vertices))
    table.add_row("Faces", str(output.num_faces))
    table.add_row("Textures", str(len(output.textures)))
    console.print(table)
    for failed in output.failed_textures:
        console.print(f"[yellow]Skipped {failed.role} of {failed.material}:[/yellow] {failed.error}")


if __name__ == "__main__":
    app()
