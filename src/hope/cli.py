"""CLI entry point for HOPE.

Usage:
    hope run                               # Run full pipeline
    hope run-step plane_segmentation -i '{"cloud_path": "cloud.ply"}'
    hope info                              # Show pipeline steps
    hope segment scan.ply --xy 0.05 --z 0.02
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from hope.core.logging import setup_logging

app = typer.Typer(name="hope", help="Horizontal plane extraction from point clouds")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


@app.command()
def run(
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Run the full pipeline."""
    setup_logging(log_level)
    from hope.core.pipeline_runner import run_pipeline

    results = run_pipeline(config)
    for name, output in results.items():
        console.print(f"[green]{name}[/green]: {output.model_dump_json()}")


@app.command()
def run_step(
    step_name: str = typer.Argument(..., help="Step name (e.g. plane_segmentation)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    input_json: str = typer.Option(None, "--input", "-i", help="Input as JSON string"),
) -> None:
    """Run a single pipeline step."""
    setup_logging()
    from hope.core.pipeline_runner import import_step_class, load_pipeline_config, load_step_config

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
        required = step_cls.input_type.model_json_schema().get("required", [])
        if required:
            console.print(f"[yellow]Step '{step_name}' requires input fields: {required}[/yellow]")
            console.print("[yellow]Use --input/-i with JSON string, e.g.:[/yellow]")
            console.print(f'  hope run-step {step_name} -i \'{{"field": "value"}}\'')
            raise typer.Exit(1)
        input_data = {}

    console.print(f"[green]Running step: {step_name}[/green]")
    output = step_instance.execute(step_cls.input_type(**input_data))
    console.print(f"[green]Done. Output:[/green] {output.model_dump_json(indent=2)}")


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps and their status."""
    from hope.core.pipeline_runner import load_pipeline_config

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
def segment(
    ply_path: Path = typer.Argument(..., exists=True, help="Point cloud in the base frame"),
    xy: float = typer.Option(0.05, "--xy", help="xy resolution (meters)"),
    z: float = typer.Option(0.02, "--z", help="z resolution (meters)"),
    min_cluster: int = typer.Option(20, help="Minimum cluster size"),
    max_cluster: int = typer.Option(307200, help="Maximum cluster size"),
    neighbors: int = typer.Option(8, help="k nearest neighbors for region growing"),
    render: Path = typer.Option(None, help="Directory for per-plane PNG renders"),
    plot: Path = typer.Option(None, help="Directory for overview plots of the cloud and planes"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Extract horizontal planes from one PLY and print them."""
    from pydantic import ValidationError

    from hope.steps.s01_plane_segmentation import PlaneSegmenter, SegmentationConfig
    from hope.utils.io import read_ply

    setup_logging(log_level)
    try:
        cfg = SegmentationConfig(
            xy_resolution=xy,
            z_resolution=z,
            min_cluster_size=min_cluster,
            max_cluster_size=max_cluster,
            neighbor_count=neighbors,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red]\n{e}")
        raise typer.Exit(2)

    console.print(
        f"Using threshold: xy@{cfg.xy_resolution} z@{cfg.z_resolution} "
        f"(th_norm={cfg.th_norm:.3f})"
    )
    cloud = read_ply(ply_path)
    results = PlaneSegmenter(cfg).find_all_planes(cloud)

    table = Table(title=f"Horizontal planes: {ply_path.name}")
    table.add_column("#", style="dim")
    table.add_column("Height (m)", style="cyan")
    table.add_column("Points", style="green")
    table.add_column("dz", style="yellow")
    table.add_column("Spread", style="yellow")
    table.add_column("Max", style="magenta")
    for i, plane in enumerate(results):
        table.add_row(
            str(i),
            f"{plane.height:.3f}",
            str(plane.num_points),
            f"{plane.dz:.4f}",
            f"{plane.dxy_max:.3f}",
            "*" if i == results.max_plane_index else "",
        )
    console.print(table)

    if render is not None and len(results):
        from hope.utils.visualization import MatplotlibPlaneRenderer

        renderer = MatplotlibPlaneRenderer(render)
        for plane in results:
            out = renderer.render(plane)
            console.print(f"Rendered plane {plane.id} -> {out}")

    if plot is not None:
        from hope.utils.visualization import plot_planes, plot_point_cloud

        plot.mkdir(parents=True, exist_ok=True)
        plot_point_cloud(cloud, title=ply_path.name, save_path=plot / "cloud.png")
        plot_planes(
            results,
            source_points=cloud.points,
            max_plane=results.max_plane,
            save_path=plot / "planes.png",
        )
        console.print(f"Plots saved to {plot}")


if __name__ == "__main__":
    app()
