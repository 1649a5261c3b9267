"""CLI entry point for slabfit.

Usage:
    slabfit run                             # Run full pipeline
    slabfit run-step slab_extraction -i '{"points_path": "..."}'
    slabfit info                            # Show pipeline info
    slabfit extract points.txt --num-planes 5
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from slabfit.core.logging import setup_logging

app = typer.Typer(name="slabfit", help="RANSAC slab fitting for 3D point clouds")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


@app.command()
def run(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Run the full pipeline."""
    setup_logging()
    from slabfit.core.pipeline_runner import run_pipeline

    run_pipeline(config)


@app.command()
def run_step(
    step_name: str = typer.Argument(..., help="Step name (e.g. slab_extraction)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    input_json: str = typer.Option(None, "--input", "-i", help="Input as JSON string"),
) -> None:
    """Run a single pipeline step."""
    import json

    setup_logging()
    from slabfit.core.pipeline_runner import load_pipeline_config, import_step_class, load_step_config

    pipeline_cfg = load_pipeline_config(config)
    entry = next((s for s in pipeline_cfg.steps if s.name == step_name), None)
    if entry is None:
        console.print(f"[red]Step '{step_name}' not found in pipeline config[/red]")
        raise typer.Exit(1)

    step_cls = import_step_class(entry.module)
    step_config = load_step_config(Path(entry.config_file), step_cls.config_type)
    step_instance = step_cls(config=step_config, data_root=pipeline_cfg.data_root)

    if input_json:
        input_data = json.loads(input_json)
    else:
        input_data = dict(entry.inputs)
        schema = step_cls.input_type.model_json_schema()
        missing = [f for f in schema.get("required", []) if f not in input_data]
        if missing:
            console.print(f"[yellow]Step '{step_name}' requires input fields: {missing}[/yellow]")
            console.print("[yellow]Use --input/-i with JSON string, e.g.:[/yellow]")
            console.print(f'  slabfit run-step {step_name} -i \'{{"field": "value"}}\'')
            raise typer.Exit(1)

    console.print(f"[green]Running step: {step_name}[/green]")
    step_input = step_cls.input_type(**input_data)
    output = step_instance.execute(step_input)
    console.print(f"[green]Done. Output:[/green] {output.model_dump_json(indent=2)}")


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps and their status."""
    from slabfit.core.pipeline_runner import load_pipeline_config

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
def extract(
    points: Path = typer.Argument(..., help="Text 'x y z [nx ny nz]' or PLY point file"),
    num_planes: int = typer.Option(10, help="Maximum number of slabs"),
    num_iters: int = typer.Option(1000, help="RANSAC trials per slab"),
    thickness: float = typer.Option(0.02, help="Full slab thickness"),
    min_inliers: int = typer.Option(100, help="A slab needs strictly more inliers than this"),
    seed: Optional[int] = typer.Option(None, help="RNG seed"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write slabs as JSON"),
    log_level: str = typer.Option("WARNING", help="Logging level"),
) -> None:
    """Extract slabs from a point file and print a summary."""
    import json

    setup_logging(log_level)
    from slabfit.steps.s01_slab_extraction._ransac import extract_slabs
    from slabfit.utils.point_cloud import PointCloud

    if not points.exists():
        console.print(f"[red]Point file not found: {points}[/red]")
        raise typer.Exit(1)
    if thickness < 0:
        console.print(f"[red]Thickness must be >= 0, got {thickness}[/red]")
        raise typer.Exit(1)

    try:
        cloud = PointCloud.load(points)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    results = extract_slabs(
        cloud.positions, num_planes, num_iters, thickness, min_inliers, rng=seed,
    )

    table = Table(title=f"Slabs: {points.name} ({len(cloud)} points)")
    table.add_column("#", style="dim")
    table.add_column("Normal", style="cyan")
    table.add_column("d", style="green")
    table.add_column("Inliers", style="yellow")
    for i, r in enumerate(results):
        n = r.slab.plane.normal
        table.add_row(str(i), f"({n[0]:.3f}, {n[1]:.3f}, {n[2]:.3f})", f"{r.slab.plane.d:.4f}", str(r.count))
    console.print(table)

    if output is not None:
        data = [{"id": i, "num_inliers": r.count, **r.slab.to_dict()} for i, r in enumerate(results)]
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w") as f:
            json.dump(data, f, indent=2)
        console.print(f"[green]Wrote {len(results)} slabs -> {output}[/green]")


if __name__ == "__main__":
    app()
