#!/usr/bin/env python3
"""
Tests for reading and writing landscape files
"""

from unittest.mock import MagicMock

import numpy as np
import pytest
import rasterio
from rasterio.crs import CRS
from rasterio.transform import from_origin

from conftest import make_stack
from raster_codecs.exceptions import ConfigError, FormatError, UserCancelled
from raster_codecs.lcp import LCPDataset, create_copy
from raster_codecs.lcp.layout import HEADER_SIZE
from raster_codecs.lcp.options import LinearUnit
from raster_codecs.sources import ArraySource, RasterioSource


class TestCreateCopy:
    """Writing a landscape file from a raster source"""

    def test_pixels_round_trip(self, tmp_path, utm_source):
        with create_copy(tmp_path / "out.lcp", utm_source) as ds:
            assert (ds.width, ds.height, ds.count) == (4, 3, 5)
            for band in range(1, 6):
                np.testing.assert_array_equal(ds.read_band(band), utm_source.data[band - 1])

    def test_file_size(self, tmp_path, utm_source):
        path = tmp_path / "out.lcp"
        create_copy(path, utm_source).close()
        assert path.stat().st_size == HEADER_SIZE + 3 * 4 * 5 * 2

    @pytest.mark.parametrize("bands,crown,ground", [(7, False, True), (8, True, False), (10, True, True)])
    def test_flags_from_band_count(self, tmp_path, bands, crown, ground):
        source = ArraySource(make_stack(bands), crs=None)
        with create_copy(tmp_path / "out.lcp", source, options={"LATITUDE": "45"}) as ds:
            assert (ds.header.crown_fuels, ds.header.ground_fuels) == (crown, ground)
            np.testing.assert_array_equal(ds.read_band(bands), source.data[-1])

    def test_geotransform(self, tmp_path, utm_source):
        with create_copy(tmp_path / "out.lcp", utm_source) as ds:
            assert ds.transform == utm_source.transform
            assert ds.header.bounds == (500000.0, 4499910.0, 500120.0, 4500000.0)

    def test_projection_file(self, tmp_path, utm_source):
        path = tmp_path / "out.lcp"
        with create_copy(path, utm_source) as ds:
            assert (tmp_path / "out.prj").exists()
            assert ds.crs is not None
            assert ds.file_list() == [str(path), str(tmp_path / "out.prj")]

    def test_progress_reports(self, tmp_path, utm_source):
        progress = MagicMock(return_value=True)
        create_copy(tmp_path / "out.lcp", utm_source, progress=progress).close()

        fractions = [call.args[0] for call in progress.call_args_list]
        assert len(fractions) == utm_source.height + 2
        assert fractions[0] == 0.0
        assert fractions[-1] == 1.0
        assert fractions == sorted(fractions)

    def test_cancel_leaves_partial_file(self, tmp_path, utm_source):
        path = tmp_path / "out.lcp"
        with pytest.raises(UserCancelled):
            create_copy(path, utm_source, progress=lambda fraction: fraction < 0.5)
        assert path.exists()
        assert path.stat().st_size < HEADER_SIZE + 3 * 4 * 5 * 2


class TestConfigErrors:
    """Invalid configurations fail before the file is created"""

    def test_unsupported_band_count(self, tmp_path):
        path = tmp_path / "out.lcp"
        with pytest.raises(ConfigError, match="6 bands"):
            create_copy(path, ArraySource(make_stack(6)), options={"LATITUDE": "45"})
        assert not path.exists()

    def test_latitude_without_crs(self, tmp_path):
        path = tmp_path / "out.lcp"
        with pytest.raises(ConfigError, match="latitude"):
            create_copy(path, ArraySource(make_stack(5)))
        assert not path.exists()

    def test_invalid_option(self, tmp_path, utm_source):
        path = tmp_path / "out.lcp"
        with pytest.raises(ConfigError):
            create_copy(path, utm_source, options={"SLOPE_UNIT": "RADIANS"})
        assert not path.exists()

    def test_strict_rejects_float_data(self, tmp_path):
        source = ArraySource(make_stack(5).astype(np.float32), crs=None)
        with pytest.raises(ConfigError, match="16-bit"):
            create_copy(tmp_path / "out.lcp", source, strict=True, options={"LATITUDE": "45"})

    def test_strict_requires_linear_unit(self, tmp_path):
        path = tmp_path / "out.lcp"
        with pytest.raises(ConfigError, match="linear unit"):
            create_copy(path, ArraySource(make_stack(5)), strict=True, options={"LATITUDE": "45"})
        assert not path.exists()

    def test_strict_rejects_unit_scale(self, tmp_path):
        source = ArraySource(
            make_stack(5),
            transform=from_origin(6000000.0, 2100000.0, 100.0, 100.0),
            crs=CRS.from_epsg(2227),  # California zone 3, US survey feet
        )
        with pytest.raises(ConfigError, match="Unit scale"):
            create_copy(tmp_path / "out.lcp", source, strict=True)


class TestRecoverable:
    """Problems that only warn outside strict mode"""

    def test_float_data_rounded(self, tmp_path):
        data = make_stack(5).astype(np.float32)
        data[0] += 0.7
        data[1] += 0.3
        source = ArraySource(data, crs=None)
        with create_copy(tmp_path / "out.lcp", source, options={"LATITUDE": "45"}) as ds:
            np.testing.assert_array_equal(ds.read_band(1), make_stack(5)[0] + 1)
            np.testing.assert_array_equal(ds.read_band(2), make_stack(5)[1])
            assert (ds.header.bands[0].minimum, ds.header.bands[0].maximum) == (1, 12)
            assert ds.header.bands[0].classification.classes == tuple(range(1, 13))

    def test_out_of_range_values_clamped(self, tmp_path):
        data = make_stack(5).astype(np.uint16)
        data[0] = 40000
        source = ArraySource(data, crs=None)
        with create_copy(tmp_path / "out.lcp", source, options={"LATITUDE": "45"}) as ds:
            assert (ds.read_band(1) == 32767).all()
            band = ds.header.bands[0]
            assert (band.minimum, band.maximum) == (32767, 32767)
            assert band.classification.classes == (32767,)

    def test_negative_floats_clamped(self, tmp_path):
        data = make_stack(5).astype(np.float64)
        data[2] = -1e6
        source = ArraySource(data, crs=None)
        with create_copy(tmp_path / "out.lcp", source, options={"LATITUDE": "45"}) as ds:
            assert (ds.read_band(3) == -32768).all()
            assert ds.header.bands[2].minimum == -32768

    def test_missing_linear_unit_defaults_to_meters(self, tmp_path):
        source = ArraySource(make_stack(5))
        with create_copy(tmp_path / "out.lcp", source, options={"LATITUDE": "45"}) as ds:
            assert ds.header.linear_unit is LinearUnit.METERS

    def test_feet_projection(self, tmp_path):
        source = ArraySource(
            make_stack(5),
            transform=from_origin(6000000.0, 2100000.0, 100.0, 100.0),
            crs=CRS.from_epsg(2227),
        )
        with create_copy(tmp_path / "out.lcp", source) as ds:
            assert ds.header.linear_unit is LinearUnit.FEET
            assert ds.metadata()["LINEAR_UNIT"] == "Feet"


class TestLatitude:
    """Header latitude"""

    def test_option_wins(self, tmp_path, utm_source):
        with create_copy(tmp_path / "out.lcp", utm_source, options={"LATITUDE": "-12"}) as ds:
            assert ds.header.latitude == -12

    def test_from_geographic_center(self, tmp_path, geographic_source):
        with create_copy(tmp_path / "out.lcp", geographic_source) as ds:
            assert ds.header.latitude == 45

    def test_from_projected_center(self, tmp_path, utm_source):
        with create_copy(tmp_path / "out.lcp", utm_source) as ds:
            assert ds.header.latitude in (40, 41)


class TestStatisticsAndMetadata:
    """Band statistics, classes and metadata items"""

    def test_dataset_metadata(self, tmp_path, utm_source):
        with create_copy(tmp_path / "out.lcp", utm_source) as ds:
            metadata = ds.metadata()
        assert metadata["LINEAR_UNIT"] == "Meters"
        assert metadata["DESCRIPTION"] == "LCP file created by raster-codecs."
        assert metadata["LATITUDE"] in ("40", "41")

    def test_band_metadata(self, tmp_path, utm_source):
        with create_copy(tmp_path / "out.lcp", utm_source) as ds:
            elevation = ds.band_metadata(1)
            fuel = ds.band_metadata(4)
            assert ds.band_description(4) == "Fuel models"

        assert elevation["ELEVATION_UNIT"] == "0"
        assert elevation["ELEVATION_UNIT_NAME"] == "Meters"
        assert (elevation["ELEVATION_MIN"], elevation["ELEVATION_MAX"]) == ("0", "11")
        assert elevation["ELEVATION_NUM_CLASSES"] == "12"
        assert elevation["ELEVATION_FILE"] == ""

        assert fuel["FUEL_MODEL_OPTION"] == "0"
        assert fuel["FUEL_MODEL_NUM_CLASSES"] == "12"
        assert fuel["FUEL_MODEL_VALUES"] == ",".join(str(v) for v in range(300, 312))

    def test_too_many_classes(self, tmp_path):
        data = make_stack(5, height=20, width=10)
        with create_copy(tmp_path / "out.lcp", ArraySource(data), options={"LATITUDE": "45"}) as ds:
            assert ds.header.bands[0].classification.is_too_many
            assert ds.band_metadata(4)["FUEL_MODEL_VALUES"] == ""

    def test_nodata_excluded(self, tmp_path):
        source = ArraySource(make_stack(5), nodata=0)
        with create_copy(tmp_path / "out.lcp", source, options={"LATITUDE": "45"}) as ds:
            band = ds.header.bands[0]
        assert band.minimum == 1
        assert 0 not in band.classification.classes

    def test_classification_disabled(self, tmp_path, utm_source):
        options = {"CLASSIFY_DATA": "NO"}
        with create_copy(tmp_path / "out.lcp", utm_source, options=options) as ds:
            assert ds.band_metadata(2)["SLOPE_NUM_CLASSES"] == "-1"
            assert ds.header.bands[1].maximum == 111

    def test_statistics_disabled(self, tmp_path, utm_source):
        options = {"CLASSIFY_DATA": "NO", "CALCULATE_STATS": "NO"}
        with create_copy(tmp_path / "out.lcp", utm_source, options=options) as ds:
            assert (ds.header.bands[1].minimum, ds.header.bands[1].maximum) == (0, 0)

    def test_rasterio_source_path_recorded(self, tmp_path):
        tif = tmp_path / "stack.tif"
        data = make_stack(5)
        with rasterio.open(
            tif,
            "w",
            driver="GTiff",
            height=3,
            width=4,
            count=5,
            dtype="int16",
            crs="EPSG:32611",
            transform=from_origin(500000.0, 4500000.0, 30.0, 30.0),
        ) as dst:
            dst.write(data)

        with RasterioSource.open(tif) as source:
            with create_copy(tmp_path / "out.lcp", source) as ds:
                assert ds.band_metadata(3)["ASPECT_FILE"] == str(tif)
                np.testing.assert_array_equal(ds.read_band(3), data[2])


class TestOpen:
    """Opening existing files"""

    def test_short_file(self, tmp_path):
        path = tmp_path / "short.lcp"
        path.write_bytes(b"\x15\x00\x00\x00" * 10)
        with pytest.raises(FormatError):
            LCPDataset.open(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            LCPDataset.open(tmp_path / "missing.lcp")

    def test_truncated_pixels(self, tmp_path, utm_source):
        path = tmp_path / "out.lcp"
        create_copy(path, utm_source).close()
        path.write_bytes(path.read_bytes()[:-10])

        with LCPDataset.open(path) as ds:
            ds.read_row(1, 0)
            with pytest.raises(OSError, match="Short read"):
                ds.read_row(1, 2)

    def test_row_and_band_bounds(self, tmp_path, utm_source):
        with create_copy(tmp_path / "out.lcp", utm_source) as ds:
            with pytest.raises(IndexError):
                ds.read_row(6, 0)
            with pytest.raises(IndexError):
                ds.read_row(1, 3)

    def test_closed_dataset(self, tmp_path, utm_source):
        ds = create_copy(tmp_path / "out.lcp", utm_source)
        ds.close()
        with pytest.raises(ValueError):
            ds.read_row(1, 0)

    def test_unreadable_projection_ignored(self, tmp_path, utm_source):
        path = tmp_path / "out.lcp"
        create_copy(path, utm_source).close()
        (tmp_path / "out.prj").write_text("not a projection")

        with LCPDataset.open(path) as ds:
            assert ds.crs is None
            assert ds.file_list() == [str(path)]
