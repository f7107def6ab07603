#!/usr/bin/env python3
"""
Example usage of the raster-codecs library

Writes a landscape file from an in-memory stack, reads its header back and
shows the CLI commands for the same workflow.
"""

import numpy as np
from rasterio.crs import CRS
from rasterio.transform import from_origin

from raster_codecs import ArraySource, LCPDataset, create_copy


def create_sample_landscape(filename="sample.lcp"):
    """Write a 5-band landscape file from a synthetic stack"""
    width, height = 100, 100
    x = np.linspace(0, 10, width)
    y = np.linspace(0, 10, height)
    X, Y = np.meshgrid(x, y)

    elevation = 1000 + 100 * np.sin(X) * np.cos(Y)
    slope = np.abs(10 * np.cos(X))
    aspect = (np.degrees(np.arctan2(Y - 5, X - 5)) + 360) % 360
    fuel_model = np.where(X < 5, 1, 8)
    canopy_cover = np.clip(50 + 40 * np.sin(Y), 0, 100)
    stack = np.stack([elevation, slope, aspect, fuel_model, canopy_cover]).astype(np.int16)

    source = ArraySource(
        stack,
        transform=from_origin(500000.0, 4500000.0, 30.0, 30.0),
        crs=CRS.from_epsg(32611),
    )

    with create_copy(filename, source) as ds:
        print(f"Created landscape: {filename}")
        print(f"  Shape: {ds.height}x{ds.width}, {ds.count} bands")
        print(f"  Latitude: {ds.header.latitude}")
    return filename


def show_header(filename):
    """Print the decoded header of a landscape file"""
    with LCPDataset.open(filename) as ds:
        for key, value in ds.metadata().items():
            print(f"  {key}: {value}")
        for band in range(1, ds.count + 1):
            items = ds.band_metadata(band)
            print(f"  Band {band} ({ds.band_description(band)}): {items}")


if __name__ == "__main__":
    lcp_file = create_sample_landscape()
    show_header(lcp_file)

    print("\n" + "=" * 50)
    print("CLI Commands:")
    print("=" * 50)

    print("\n1. Convert a GeoTIFF stack to a landscape file:")
    print("   raster-codecs convert stack.tif -o landscape.lcp")

    print("\n2. Get file information:")
    print(f"   raster-codecs info {lcp_file}")

    print("\n3. Compare landscape and source:")
    print("   raster-codecs compare landscape.lcp stack.tif")

    print("\n4. Dump the XMP packet of a GIF:")
    print("   raster-codecs xmp map.gif")
