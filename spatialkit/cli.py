"""Command line interface for the spatial toolkit.

Usage:
    spatialkit run fires --fires perimeters.geojson --campgrounds campgrounds.csv
    spatialkit run smoke --smoke plumes.shp --fires perimeters.geojson \\
        --campgrounds campgrounds.csv --smoke-density Heavy
    spatialkit area perimeters.geojson --unit acre
    spatialkit relate campgrounds.geojson buffers.geojson --predicate within --dense
    spatialkit validate perimeters.geojson campgrounds.csv
    spatialkit --help
"""

import json
import logging
import logging.config
from pathlib import Path

import typer

from spatialkit.config import (
    CRSPolicy,
    DebugConfig,
    LoadPolicy,
    ToolkitConfig,
    WalkthroughConfig,
)
from spatialkit.errors import SpatialToolkitError
from spatialkit.io import read_vector
from spatialkit.models.measurement import Unit
from spatialkit.outputs import AttributesCSVOutput, RelationCSVOutput
from spatialkit.spatial import add_area_column, intersects, within
from spatialkit.spatial.utils import ensure_crs
from spatialkit.tabular import read_table
from spatialkit.validation import TableValidator, VectorFileValidator
from spatialkit.walkthroughs import WALKTHROUGHS, run_walkthrough

logger = logging.getLogger(__name__)

app = typer.Typer(help="Spatial relations and measurements for wildfire layers")


LOGGING_CONFIG = "logging.json"


def _logging_config_path() -> Path:
    """A logging.json in the working directory wins over the packaged default."""
    local = Path(LOGGING_CONFIG)
    if local.exists():
        return local
    return Path(__file__).parent / LOGGING_CONFIG


def configure_logging(verbose: bool = False) -> None:
    """Configure logging from logging.json, falling back to a basic text format."""
    config_path = _logging_config_path()

    if config_path.exists():
        with open(config_path) as f:
            logging.config.dictConfig(json.load(f))
    else:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    if verbose:
        logging.getLogger("spatialkit").setLevel(logging.DEBUG)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    configure_logging(verbose)


def _load_points(path: Path, walkthrough_config: WalkthroughConfig, policy: LoadPolicy):
    if path.suffix.lower() in (".csv", ".txt"):
        result = read_table(
            path,
            walkthrough_config.longitude_column,
            walkthrough_config.latitude_column,
            policy=policy,
        )
        if result.skipped:
            logger.warning(f"{path.name}: skipped {result.skipped} rows without coordinates")
        return result.features
    return read_vector(path)


@app.command()
def run(
    walkthrough: str = typer.Argument(..., help=f"Walkthrough to run ({', '.join(WALKTHROUGHS)})"),
    fires: Path = typer.Option(..., "--fires", help="Fire perimeter polygons", exists=True),
    campgrounds: Path = typer.Option(
        ..., "--campgrounds", help="Campground points (CSV with lon/lat or vector file)", exists=True
    ),
    smoke: Path | None = typer.Option(None, "--smoke", help="Smoke plume polygons", exists=True),
    output_dir: Path = typer.Option(Path("output"), "--output-dir", "-o", help="Output directory"),
    min_fire_acres: float | None = typer.Option(None, "--min-fire-acres", min=0),
    buffer_m: float | None = typer.Option(None, "--buffer-m", help="Evacuation buffer (metres)"),
    smoke_density: str | None = typer.Option(None, "--smoke-density", help="e.g. Heavy"),
    planar_crs: int | None = typer.Option(None, "--planar-crs", help="EPSG code (3310 or 5070)"),
    skip_missing: bool = typer.Option(
        False, "--skip-missing", help="Skip table rows without coordinates instead of failing"
    ),
    parallel: bool = typer.Option(False, "--parallel", help="Evaluate matrices in worker processes"),
):
    """Run a walkthrough and write each result table as CSV."""
    overrides = {
        "min_fire_acres": min_fire_acres,
        "evacuation_buffer_m": buffer_m,
        "smoke_density": smoke_density,
        "planar_crs": planar_crs,
    }
    walkthrough_config = WalkthroughConfig(**{k: v for k, v in overrides.items() if v is not None})
    toolkit = ToolkitConfig(parallel=parallel) if parallel else ToolkitConfig()
    policy = LoadPolicy.SKIP if skip_missing else toolkit.load_policy

    try:
        inputs = {
            "fires": read_vector(fires),
            "campgrounds": _load_points(campgrounds, walkthrough_config, policy),
        }
        if smoke is not None:
            inputs["smoke"] = read_vector(smoke)

        tables = run_walkthrough(
            walkthrough, inputs, walkthrough_config, toolkit, DebugConfig.from_env()
        )
    except (KeyError, SpatialToolkitError) as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e

    output = AttributesCSVOutput()
    for name, df in tables.items():
        path = output.write(df, output_dir / f"{walkthrough}_{name}.csv")
        typer.echo(f"{name}: {len(df)} rows -> {path}")


@app.command()
def area(
    vector: Path = typer.Argument(..., help="Polygon layer", exists=True),
    unit: Unit = typer.Option(Unit.ACRE, "--unit", "-u", help="Area unit"),
    planar_crs: int | None = typer.Option(
        None, "--planar-crs", help="EPSG code used for measuring (default: SPATIALKIT_PLANAR_CRS)"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write attributes to CSV"),
):
    """Append an area column to every feature of a layer."""
    try:
        if planar_crs is None:
            planar_crs = ToolkitConfig().planar_crs
        collection = ensure_crs(read_vector(vector), planar_crs)
        measured = add_area_column(collection, unit, "area")
    except SpatialToolkitError as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e

    if output is not None:
        AttributesCSVOutput().write(measured, output)
        typer.echo(f"Wrote {len(measured)} rows -> {output}")
    else:
        typer.echo(measured.to_frame().to_string(index=False))


@app.command()
def relate(
    source: Path = typer.Argument(..., help="Source layer (rows)", exists=True),
    related: Path = typer.Argument(..., help="Related layer (columns)", exists=True),
    predicate: str = typer.Option("intersects", "--predicate", "-p", help="intersects or within"),
    dense: bool = typer.Option(False, "--dense", help="Write a dense 0/1 matrix"),
    reproject: bool = typer.Option(
        False, "--reproject", help="Reproject the related layer on CRS mismatch"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the relation to CSV"),
):
    """Evaluate a spatial predicate between two layers."""
    operations = {"intersects": intersects, "within": within}
    if predicate not in operations:
        logger.error(f"Unknown predicate '{predicate}' (expected intersects or within)")
        raise typer.Exit(code=2)

    config = ToolkitConfig(crs_policy=CRSPolicy.REPROJECT) if reproject else ToolkitConfig()
    try:
        relation = operations[predicate](read_vector(source), read_vector(related), config)
    except SpatialToolkitError as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e

    if output is not None:
        RelationCSVOutput(dense=dense).write(relation, output)
        typer.echo(f"Wrote {relation.count()} {predicate} pairs -> {output}")
    else:
        frame = relation.to_frame() if dense else relation.to_pairs()
        typer.echo(frame.to_string())


@app.command()
def validate(
    paths: list[Path] = typer.Argument(..., help="Vector files or CSV tables"),
    longitude_column: str = typer.Option("longitude", "--longitude-column"),
    latitude_column: str = typer.Option("latitude", "--latitude-column"),
):
    """Check input layers and report every problem found."""
    vector_validator = VectorFileValidator()
    table_validator = TableValidator(longitude_column, latitude_column)

    failed = False
    for path in paths:
        if path.suffix.lower() in (".csv", ".txt"):
            errors = table_validator.validate(path)
        else:
            errors = vector_validator.validate(path)

        if errors:
            failed = True
            typer.echo(f"{path}: {len(errors)} problem(s)")
            for error in errors:
                field = f"[{error.field}] " if error.field else ""
                typer.echo(f"  - {field}{error.message}")
        else:
            typer.echo(f"{path}: OK")

    if failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
