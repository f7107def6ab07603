"""
Command-line interface for raster-codecs

Inspect landscape (.lcp) and GIF files, convert rasters to landscape files
and extract embedded XMP, with support for local files and HTTP(S) URLs.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from .compare import compare_rasters, display_comparison_table
from .exceptions import ConfigError
from .gif import GIFDataset, locate_xmp
from .gif.records import GIF_SIGNATURES
from .lcp import LCPDataset, create_copy, identify
from .remote import download_remote, is_remote_url
from .sources import RasterioSource

app = typer.Typer(
    name="raster-codecs",
    help="Inspect and write FARSITE landscape files, GIF palettes and embedded XMP.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(console=console, rich_tracebacks=True)],
)
logger = logging.getLogger("raster_codecs")


def _resolve_input(input_path: str, temp_files: list) -> Path:
    """Resolve input path, downloading if remote."""
    if is_remote_url(input_path):
        console.print(f"[cyan]Downloading remote file: {input_path}[/cyan]")
        local_path = download_remote(input_path)
        temp_files.append(local_path)
        return local_path
    return Path(input_path)


def _cleanup(temp_files: list):
    for tmp in temp_files:
        if tmp.exists():
            tmp.unlink()


def parse_creation_options(values: Optional[List[str]]) -> Dict[str, str]:
    """Turn repeated KEY=VALUE flags into an options dict."""
    options = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ConfigError(f"Creation option must be KEY=VALUE, got '{item}'")
        options[key.strip().upper()] = value.strip()
    return options


def sniff_format(path: Path) -> str:
    """'lcp', 'gif' or 'raster' from the leading bytes of a file."""
    with open(path, "rb") as f:
        head = f.read(64)
    if head[:6] in GIF_SIGNATURES:
        return "gif"
    if path.suffix.lower() == ".lcp" and identify(head):
        return "lcp"
    return "raster"


@app.command()
def info(
    file_path: str = typer.Argument(..., help="File to inspect (local or remote URL)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """
    Display information about a landscape, GIF or other raster file.

    Examples:
        raster-codecs info landscape.lcp
        raster-codecs info map.gif
        raster-codecs info https://example.com/landscape.lcp
    """
    if verbose:
        logging.getLogger("raster_codecs").setLevel(logging.DEBUG)

    temp_files = []

    try:
        local_path = _resolve_input(file_path, temp_files)

        if not local_path.exists():
            console.print(f"[red]Error: File not found: {local_path}[/red]")
            raise typer.Exit(1)

        kind = sniff_format(local_path)
        if kind == "lcp":
            _show_lcp_info(local_path)
        elif kind == "gif":
            _show_gif_info(local_path)
        else:
            _show_raster_info(local_path)

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Info failed")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        _cleanup(temp_files)


@app.command()
def convert(
    input_file: str = typer.Argument(
        ..., help="Input raster with 5, 7, 8 or 10 bands. Supports local paths and http(s) URLs"
    ),
    output_file: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Output .lcp path (auto-generated if not provided)"
    ),
    creation_options: Optional[List[str]] = typer.Option(
        None, "--co", help="Creation option KEY=VALUE (repeatable), e.g. --co LATITUDE=45"
    ),
    strict: bool = typer.Option(
        False, "--strict", help="Fail instead of warning on unit and data type problems"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing output file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
):
    """
    Convert a multi-band raster to a FARSITE landscape file.

    Examples:
        raster-codecs convert stack.tif -o landscape.lcp
        raster-codecs convert stack.tif --co CLASSIFY_DATA=NO --co LINEAR_UNIT=FEET
        raster-codecs convert https://example.com/stack.tif --strict
    """
    if verbose:
        logging.getLogger("raster_codecs").setLevel(logging.DEBUG)

    temp_files = []

    try:
        input_path = _resolve_input(input_file, temp_files)

        if not input_path.exists():
            console.print(f"[red]Error: Input file does not exist: {input_path}[/red]")
            raise typer.Exit(1)

        if output_file is None:
            output_file = Path(input_path.name).with_suffix(".lcp")

        if output_file.exists() and not force:
            console.print(f"[red]Error: Output exists: {output_file}[/red]")
            console.print("[yellow]Use --force to overwrite[/yellow]")
            raise typer.Exit(1)

        options = parse_creation_options(creation_options)

        with RasterioSource.open(input_path) as source, Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Writing landscape", total=1.0)

            def report(fraction: float) -> bool:
                progress.update(task, completed=fraction)
                return True

            with create_copy(output_file, source, strict=strict, options=options, progress=report) as ds:
                console.print(
                    f"[green]{ds.width}x{ds.height}, {ds.count} bands, "
                    f"latitude {ds.header.latitude}[/green]"
                )

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Conversion failed")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        _cleanup(temp_files)


@app.command()
def xmp(
    file_path: str = typer.Argument(..., help="GIF file (local or remote URL)"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the packet to this file instead of the console"
    ),
):
    """
    Extract the XMP packet embedded in a GIF file.

    Examples:
        raster-codecs xmp map.gif
        raster-codecs xmp map.gif -o map.xmp
    """
    temp_files = []

    try:
        local_path = _resolve_input(file_path, temp_files)

        if not local_path.exists():
            console.print(f"[red]Error: File not found: {local_path}[/red]")
            raise typer.Exit(1)

        with open(local_path, "rb") as f:
            packet = locate_xmp(f)

        if not packet.found:
            console.print(f"[yellow]No XMP packet found in {local_path.name}[/yellow]")
            return

        if output is not None:
            output.write_bytes(packet.payload)
            console.print(f"[green]Wrote {len(packet.payload)} bytes to: {output}[/green]")
        else:
            console.print(packet.text, markup=False, highlight=False)

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("XMP extraction failed")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    finally:
        _cleanup(temp_files)


@app.command()
def compare(
    lcp_file: Path = typer.Argument(..., help="Landscape file"),
    source_file: Path = typer.Argument(..., help="Raster the landscape was created from"),
    show_bands: bool = typer.Option(
        True, "--show-bands/--no-bands", help="Show per-band statistics"
    ),
    export_json: Optional[Path] = typer.Option(
        None, "--export", "-e", help="Export comparison to JSON"
    ),
):
    """
    Compare a landscape file with its source raster.

    Useful for verifying that conversion preserved every pixel.

    Examples:
        raster-codecs compare landscape.lcp stack.tif
        raster-codecs compare landscape.lcp stack.tif --export results.json
    """
    for f in [lcp_file, source_file]:
        if not f.exists():
            console.print(f"[red]File not found: {f}[/red]")
            raise typer.Exit(1)

    try:
        results = compare_rasters(lcp_file, source_file, show_bands)
        display_comparison_table(results)

        if export_json:
            with open(export_json, "w") as f:
                json.dump(results, f, indent=2)
            console.print(f"[green]Exported to: {export_json}[/green]")

    except Exception as e:
        logger.exception("Comparison failed")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _show_lcp_info(path: Path):
    """Display landscape file information."""
    with LCPDataset.open(path) as ds:
        header = ds.header
        table = Table(title=f"LCP: {path.name}")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Dimensions", f"{ds.width} x {ds.height}")
        table.add_row("Bands", str(ds.count))
        table.add_row("Crown Fuels", "YES" if header.crown_fuels else "NO")
        table.add_row("Ground Fuels", "YES" if header.ground_fuels else "NO")
        table.add_row("Cell Size", f"{header.cell_x} x {header.cell_y}")
        table.add_row("Bounds", "({:.6f}, {:.6f}, {:.6f}, {:.6f})".format(*header.bounds))
        for key, value in ds.metadata().items():
            table.add_row(key.replace("_", " ").title(), value)
        table.add_row("CRS", str(ds.crs))
        table.add_row("File Size", f"{path.stat().st_size / 1024 / 1024:.2f} MB")
        console.print(table)

        band_table = Table(title="Bands", show_header=True)
        band_table.add_column("Band", style="cyan")
        band_table.add_column("Quantity", style="green")
        band_table.add_column("Unit", style="yellow")
        band_table.add_column("Min", style="blue")
        band_table.add_column("Max", style="red")
        band_table.add_column("Classes", style="bold")

        for descriptor in header.bands:
            classes = descriptor.classification
            if classes is None:
                class_text = "-"
            elif classes.is_too_many:
                class_text = "too many"
            else:
                class_text = str(classes.count)
            band_table.add_row(
                str(descriptor.index),
                descriptor.label,
                descriptor.unit_name or str(descriptor.unit_code),
                str(descriptor.minimum),
                str(descriptor.maximum),
                class_text,
            )
        console.print(band_table)


def _show_gif_info(path: Path):
    """Display GIF file information."""
    with GIFDataset.open(path) as ds:
        palette = ds.palette_band
        table = Table(title=f"GIF: {path.name}")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Dimensions", f"{ds.width} x {ds.height}")
        table.add_row("Version", f"GIF{ds.records.version}")
        table.add_row("Palette Entries", str(len(palette.color_table)))
        table.add_row("Transparent Index", str(palette.transparent_index))
        table.add_row("Background Index", str(palette.background_index))
        table.add_row("Interlaced", ds.metadata("IMAGE_STRUCTURE")["INTERLACED"])
        table.add_row("Georeferenced", "YES" if ds.georeferenced else "NO")
        packet = ds.xmp()
        table.add_row("XMP", f"{len(packet.payload)} bytes" if packet.found else "None")
        console.print(table)


def _show_raster_info(path: Path):
    """Display information of any rasterio-readable file."""
    with RasterioSource.open(path) as src:
        dataset = src.dataset
        table = Table(title=f"Raster: {path.name}")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Driver", dataset.driver)
        table.add_row("Dimensions", f"{src.width} x {src.height}")
        table.add_row("Bands", str(src.count))
        table.add_row("Data Type", str(src.dtype))
        table.add_row("CRS", str(src.crs))
        table.add_row(
            "Bounds",
            f"({dataset.bounds.left:.6f}, {dataset.bounds.bottom:.6f}, "
            f"{dataset.bounds.right:.6f}, {dataset.bounds.top:.6f})",
        )
        table.add_row("File Size", f"{path.stat().st_size / 1024 / 1024:.2f} MB")
        console.print(table)


if __name__ == "__main__":
    app()
