#!/usr/bin/env python3
"""
Create test data for raster-codecs examples
"""

from pathlib import Path

import numpy as np
import rasterio
from rasterio.transform import from_origin


def create_landscape_stack(filename="sample_landscape.tif", size=(256, 256), bands=8):
    """Create a multi-band int16 stack shaped like landscape inputs"""
    width, height = size

    x = np.linspace(0, 20, width)
    y = np.linspace(0, 20, height)
    X, Y = np.meshgrid(x, y)

    elevation = 1000 + 300 * np.sin(X * 0.5) * np.cos(Y * 0.3) + 50 * np.random.rand(height, width)
    slope = np.abs(np.gradient(elevation, axis=1)) * 10
    aspect = (np.degrees(np.arctan2(Y - 10, X - 10)) + 360) % 360
    fuel_model = np.choose((X // 5).astype(int) % 4, [1, 2, 8, 10])
    canopy_cover = np.clip(60 * np.cos(X * 0.2) ** 2, 0, 100)
    layers = [elevation, slope, aspect, fuel_model, canopy_cover]

    # Crown fuels: canopy height, crown base height, crown bulk density
    if bands in (8, 10):
        layers += [canopy_cover * 0.4, canopy_cover * 0.1, canopy_cover * 0.2]
    # Ground fuels: duff, coarse woody debris
    if bands in (7, 10):
        layers += [np.full_like(X, 12.0), (X // 4) % 3]

    data = np.stack(layers).astype(np.int16)

    # UTM zone 13N, Colorado
    transform = from_origin(450000.0, 4480000.0, 30.0, 30.0)

    with rasterio.open(
        filename,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=data.shape[0],
        dtype=data.dtype,
        crs="EPSG:26913",
        transform=transform,
    ) as dst:
        dst.write(data)

    print(f"Created landscape stack: {filename}")
    print(f"  Size: {width}x{height}")
    print(f"  Bands: {data.shape[0]}")
    print(f"  Elevation range: {data[0].min()} - {data[0].max()} meters")
    return filename


def create_gif_with_xmp(filename="sample_xmp.gif", packet=b"<x:xmpmeta>sample</x:xmpmeta>"):
    """Write a 2x2 GIF carrying an XMP application extension"""
    trailer = bytes([0x01]) + bytes(range(0xFF, -1, -1)) + b"\x00"
    body = (
        b"GIF89a"
        + b"\x02\x00\x02\x00\x80\x00\x00"  # 2x2, 2-entry global table
        + b"\x00\x00\x00\xff\xff\xff"
        + b"\x21\xff\x0bXMP DataXMP" + packet + trailer
        + b"\x2c\x00\x00\x00\x00\x02\x00\x02\x00\x00"
        + b"\x02\x02\x44\x01\x00"
        + b"\x3b"
    )
    Path(filename).write_bytes(body)
    print(f"Created GIF with XMP: {filename} ({len(packet)} byte packet)")
    return filename


if __name__ == "__main__":
    print("Creating test datasets for raster-codecs...")
    print("=" * 50)

    test_dir = Path("test_data")
    test_dir.mkdir(exist_ok=True)

    base_file = create_landscape_stack(test_dir / "landscape_5.tif", bands=5)
    crown_file = create_landscape_stack(test_dir / "landscape_8.tif", bands=8)
    full_file = create_landscape_stack(test_dir / "landscape_10.tif", bands=10)
    gif_file = create_gif_with_xmp(test_dir / "sample_xmp.gif")

    print("\n" + "=" * 50)
    print("Test data created! Try these commands:")
    print("=" * 50)

    print("\n1. Convert a base stack to a landscape file:")
    print(f"   raster-codecs convert {base_file} -o test_data/landscape_5.lcp")

    print("\n2. Convert with crown fuels, feet and no classification:")
    print(
        f"   raster-codecs convert {crown_file} -o test_data/landscape_8.lcp "
        "--co CLASSIFY_DATA=NO --co CANOPY_HT_UNIT=FEET"
    )

    print("\n3. Convert the full stack in strict mode:")
    print(f"   raster-codecs convert {full_file} -o test_data/landscape_10.lcp --strict")

    print("\n4. Inspect the result:")
    print("   raster-codecs info test_data/landscape_10.lcp")

    print("\n5. Compare with the source:")
    print(f"   raster-codecs compare test_data/landscape_10.lcp {full_file}")

    print("\n6. Extract the XMP packet:")
    print(f"   raster-codecs xmp {gif_file}")
