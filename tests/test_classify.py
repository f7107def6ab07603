#!/usr/bin/env python3
"""
Tests for capped band classification
"""

import numpy as np

from raster_codecs.lcp.classify import CLASS_CAP, ClassSet, classify_band


def rows_of(values, width=10):
    data = np.asarray(values, dtype=np.int16)
    return [data[i : i + width] for i in range(0, len(data), width)]


class TestClassifyBand:
    """Distinct value collection with a cap of 99"""

    def test_ascending_with_sentinel(self):
        result = classify_band(rows_of([8, 1, 8, 2, -5, 1]))
        assert result.count == 4
        assert result.values == (0, -5, 1, 2, 8)
        assert result.classes == (-5, 1, 2, 8)

    def test_exactly_at_cap(self):
        result = classify_band(rows_of(range(CLASS_CAP)))
        assert result.count == 99
        assert len(result.values) == 100
        assert result.values[1:] == tuple(range(99))

    def test_over_cap(self):
        result = classify_band(rows_of(range(150)))
        assert result.is_too_many
        assert result == ClassSet.too_many()

    def test_one_over_cap(self):
        assert classify_band(rows_of(range(100))).is_too_many

    def test_nodata_excluded(self):
        result = classify_band(rows_of([-9999, 3, -9999, 4]))
        assert result.classes == (3, 4)

    def test_custom_nodata(self):
        result = classify_band(rows_of([0, 3, 0, 4]), nodata=0)
        assert result.classes == (3, 4)

    def test_all_nodata(self):
        result = classify_band(rows_of([-9999] * 20))
        assert result.count == 0
        assert result.values == (0,)

    def test_int16_extremes(self):
        result = classify_band(rows_of([-32768, 32767]))
        assert result.classes == (-32768, 32767)

    def test_stops_reading_once_capped(self):
        """Rows after the cap is exceeded are never pulled"""
        consumed = []

        def feed():
            for start in range(0, 1000, 50):
                consumed.append(start)
                yield np.arange(start, start + 50, dtype=np.int16)

        assert classify_band(feed()).is_too_many
        assert consumed == [0, 50]

    def test_repeated_values_across_rows(self):
        rows = [np.full(10, 7, dtype=np.int16) for _ in range(500)]
        assert classify_band(rows).classes == (7,)
