#!/usr/bin/python3

"""Test the heatmap.query module."""

import unittest
from itertools import product

from heatmap import (BucketConfig, ColorConfig, GeometryConfig,
                     InvalidConfig, OneSeries, QueryConfig, Range,
                     SparseSeries, average, bucketize, cell_details,
                     distribution, generate, percentile, samplerange)
from heatmap.colormap import BACKGROUND

PERCENTILE_SERIES = SparseSeries(100, 2, {
    100: [[[1, 10], 10], [[11, 20], 10], [[21, 30], 10], [[31, 40], 10],
          [[41, 50], 10], [[51, 60], 10], [[61, 70], 10], [[71, 80], 10],
          [[81, 90], 10], [[91, 100], 10]],
    101: [[[1, 10], 5], [[11, 20], 10], [[21, 30], 30]],
})


class PercentileTest(unittest.TestCase):
    """Test heatmap.percentile."""

    def setUp(self):
        self.map = bucketize(PERCENTILE_SERIES, BucketConfig(
            nbuckets=10, min_value=1, max_value=101)).map

    def test_bucketized_input(self):
        """Test the map the percentiles are computed from."""
        self.assertEqual(self.map, [[10] * 10, [5, 10, 30] + [0] * 7])

    def test_percentiles(self):
        """Test percentiles at and between bucket boundaries."""
        vectors = (
            (0, (1, 1)),
            (0.5, (51, 23.5)),
            (0.95, (96, 30.25)),
            (1, (101, 31)),
        )
        for p, expected in vectors:
            with self.subTest(percentile=p):
                rval = percentile(self.map, QueryConfig(
                    min_value=1, max_value=101, base=100, percentile=p))
                self.assertEqual([s for s, _ in rval], [100, 101])
                for (_, actual), value in zip(rval, expected):
                    self.assertAlmostEqual(actual, value)

    def test_empty_sample(self):
        """Test that a sample without weight reports the minimum."""
        rval = percentile([[0, 0]], QueryConfig(min_value=5, max_value=25,
                                                percentile=0.5))
        self.assertEqual(rval, [(0, 5)])

    def test_missing_percentile(self):
        """Test that the percentile must be given."""
        with self.assertRaises(InvalidConfig):
            percentile(self.map, QueryConfig(min_value=1, max_value=101))
        with self.assertRaises(InvalidConfig):
            QueryConfig(max_value=10, percentile=1.5)


class AggregateTest(unittest.TestCase):
    """Test heatmap.distribution and heatmap.average."""

    def test_distribution(self):
        """Test per-bucket totals over all samples."""
        rval = distribution([[1, 2], [3, 4]],
                            QueryConfig(min_value=0, max_value=10))
        self.assertEqual(rval, [(2.5, 4), (7.5, 6)])
        self.assertEqual(rval[0].center, 2.5)
        self.assertEqual(rval[1].total, 6)

    def test_average(self):
        """Test per-sample means of bucket centers."""
        rval = average([[1, 1], [0, 2], [0, 0]],
                       QueryConfig(min_value=0, max_value=10, base=3))
        self.assertEqual(rval, [(3, 5.0), (4, 7.5), (5, None)])

    def test_missing_max(self):
        """Test that the queries need the resolved maximum."""
        with self.assertRaises(InvalidConfig):
            distribution([[1]], QueryConfig())


class SampleRangeTest(unittest.TestCase):
    """Test heatmap.samplerange."""

    def test_samplerange(self):
        """Test mapping pixels back to samples and value ranges."""
        conf = GeometryConfig(width=100, height=50, nbuckets=10,
                              nsamples=10, min_value=0, max_value=100)
        self.assertEqual(samplerange(25, 2, conf), (2, (90, 99)))
        self.assertEqual(samplerange(0, 49, conf), (0, (0, 9)))
        self.assertEqual(samplerange(99, 25, conf).range, Range(40, 49))
        conf = conf._replace(base=5)
        self.assertEqual(samplerange(25, 2, conf).sample, 7)

    def test_inverse_of_generate(self):
        """Test that every lit pixel maps back to the cell drawn there."""
        nsamples, nbuckets, width, height = 4, 5, 8, 10
        for base in (0, 3):
            geometry = GeometryConfig(width=width, height=height,
                                      nbuckets=nbuckets, nsamples=nsamples,
                                      min_value=0, max_value=50, base=base)
            colors = ColorConfig(width=width, height=height, hue=0,
                                 saturation=(0, 1), value=1, base=base)
            for i, j in product(range(nsamples), range(nbuckets)):
                hmap = [[0] * nbuckets for _ in range(nsamples)]
                hmap[i][j] = 1
                pixels = generate(OneSeries(hmap), colors)
                for x, y in product(range(width), range(height)):
                    if pixels.pixel(x, y) == BACKGROUND:
                        continue
                    with self.subTest(base=base, cell=(i, j), pixel=(x, y)):
                        self.assertEqual(samplerange(x, y, geometry),
                                         (base + i, (10 * j, 10 * j + 9)))


class CellDetailsTest(unittest.TestCase):
    """Test heatmap.cell_details."""

    total = {100: [[[0, 9], 10], [[10, 19], 20]]}
    elements = {
        'a': {100: [[[0, 9], 4]]},
        'b': {101: [[[0, 9], 7]]},
        'c': SparseSeries(100, 1, {100: [[[0, 9], 0.2]]}),
    }
    geometry = GeometryConfig(width=10, height=20, nbuckets=2, nsamples=1,
                              min_value=0, max_value=20, base=100)

    def test_lower_cell(self):
        """Test the weight and decomposition of a cell."""
        rval = cell_details(self.total, 0, 15, self.geometry, self.elements)
        self.assertEqual(rval, (100, (0, 9), 10, {'a': 4}))

    def test_upper_cell(self):
        """Test that elements absent from a cell are left out."""
        rval = cell_details(self.total, 3, 5, self.geometry, self.elements)
        self.assertEqual(rval.total, 20)
        self.assertEqual(rval.decomposition, {})

    def test_empty_cell(self):
        """Test a cell without any weight."""
        rval = cell_details({}, 0, 0, self.geometry, self.elements)
        self.assertEqual(rval.total, 0)
        self.assertEqual(rval.decomposition, {})


if __name__ == '__main__':
    unittest.main()
