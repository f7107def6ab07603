"""
Comparison utilities for raster-codecs
"""

import logging
from pathlib import Path

import numpy as np
from rich.console import Console
from rich.table import Table

from .lcp import LCPDataset
from .sources import RasterioSource, to_int16

console = Console()
logger = logging.getLogger("raster_codecs.compare")


def _read_lcp(path: Path):
    with LCPDataset.open(path) as ds:
        data = np.stack([ds.read_band(band) for band in range(1, ds.count + 1)])
        return data, ds.crs


def _read_source(path: Path):
    with RasterioSource.open(path) as src:
        return src.dataset.read(), src.crs


def compare_rasters(lcp_path: Path, source_path: Path, show_bands: bool = True) -> dict:
    """
    Compare a landscape file with the raster it was created from.

    The source is rounded and clamped to int16 first, as the landscape writer does.

    Returns:
        Dictionary with comparison results
    """
    logger.info(f"Comparing {lcp_path} and {source_path}")

    data1, crs1 = _read_lcp(lcp_path)
    data2, crs2 = _read_source(source_path)
    data2 = to_int16(data2)

    results = {
        "file1": lcp_path.name,
        "file2": source_path.name,
        "shape_match": data1.shape == data2.shape,
        "crs_match": crs1 == crs2,
        "file1_shape": data1.shape,
        "file2_shape": data2.shape,
        "file1_crs": str(crs1),
        "file2_crs": str(crs2),
    }

    if results["shape_match"]:
        diff = np.abs(data1.astype(np.int32) - data2.astype(np.int32))
        results["arrays_equal"] = bool(np.array_equal(data1, data2))
        results["max_difference"] = float(diff.max()) if diff.size else 0.0
        results["mean_difference"] = float(diff.mean()) if diff.size else 0.0

        if show_bands:
            results["bands"] = []
            for i in range(data1.shape[0]):
                results["bands"].append(
                    {
                        "band": i + 1,
                        "equal": bool(np.array_equal(data1[i], data2[i])),
                        "max_diff": float(diff[i].max()),
                        "file1_range": [int(data1[i].min()), int(data1[i].max())],
                        "file2_range": [int(data2[i].min()), int(data2[i].max())],
                    }
                )

    return results


def display_comparison_table(results: dict):
    """Display comparison results as rich tables"""
    table = Table(title="Landscape Comparison Results", show_header=True)
    table.add_column("Property", style="cyan")
    table.add_column(results["file1"], style="green")
    table.add_column(results["file2"], style="yellow")
    table.add_column("Match", style="bold")

    table.add_row(
        "Shape",
        str(results["file1_shape"]),
        str(results["file2_shape"]),
        "YES" if results["shape_match"] else "NO",
    )
    table.add_row(
        "CRS", results["file1_crs"], results["file2_crs"], "YES" if results["crs_match"] else "NO"
    )
    console.print(table)

    if not results.get("shape_match"):
        console.print("[red]Cannot compute detailed statistics - shapes don't match![/red]")
        return

    stats_table = Table(title="Statistical Comparison", show_header=True)
    stats_table.add_column("Metric", style="cyan")
    stats_table.add_column("Value", style="bold")
    stats_table.add_row("Arrays Equal", "YES" if results["arrays_equal"] else "NO")
    stats_table.add_row("Max Difference", f"{results['max_difference']:.0f}")
    stats_table.add_row("Mean Difference", f"{results['mean_difference']:.6f}")
    console.print(stats_table)

    if "bands" in results:
        band_table = Table(title="Per-Band Statistics", show_header=True)
        band_table.add_column("Band", style="cyan")
        band_table.add_column("Equal", style="bold")
        band_table.add_column("Max Diff", style="yellow")
        band_table.add_column(f"{results['file1']} Range", style="green")
        band_table.add_column(f"{results['file2']} Range", style="blue")

        for band in results["bands"]:
            band_table.add_row(
                str(band["band"]),
                "YES" if band["equal"] else "NO",
                f"{band['max_diff']:.0f}",
                f"[{band['file1_range'][0]}, {band['file1_range'][1]}]",
                f"[{band['file2_range'][0]}, {band['file2_range'][1]}]",
            )
        console.print(band_table)
