#!/usr/bin/python3

"""Statistical queries over bucketized maps.

These work on the output of bucketize directly, before normalisation, so
bucket values are still the observed weights. Each bucket j stands for the
value range [min + j*size, min + (j+1)*size); where a single value is
needed for a bucket, its center is used.
"""

from math import floor

from heatmap.buckets import bucketize
from heatmap.common import (CellDetails, DistributionPoint, Range,
                            SampleRange, SampleValue, SparseSeries,
                            InvalidConfig, map_shape, round_half_up)
from heatmap.config import BucketConfig


def _bucket_size(config, nbuckets):
    return (config.max_value - config.min_value) / nbuckets


def samplerange(x, y, config):
    """Find the sample and value range a pixel of a rendered map shows.

    config is the GeometryConfig the map was rendered with. This is the
    inverse of the cell layout used by generate. The returned sample index
    is absolute, i.e. it includes config.base.
    """
    nbuckets = config.nbuckets
    bheight = config.height / nbuckets
    bwidth = config.width / config.nsamples
    size = _bucket_size(config, nbuckets)
    sample = floor((x + floor(config.base * bwidth)) / bwidth)
    bucket = nbuckets - floor(y / bheight) - 1
    return SampleRange(sample, Range(
        round_half_up(config.min_value + bucket * size),
        round_half_up(config.min_value + (bucket + 1) * size) - 1))


def distribution(hmap, config):
    """Sum each bucket over all samples.

    Returns a list of DistributionPoints, one per bucket, holding the
    bucket's center and its total.
    """
    _, nbuckets = map_shape(hmap)
    if not nbuckets:
        return []
    size = _bucket_size(config, nbuckets)
    return [DistributionPoint(config.min_value + (j + 0.5) * size,
                              sum(row[j] for row in hmap))
            for j in range(nbuckets)]


def average(hmap, config):
    """Compute each sample's mean, weighting bucket centers by value.

    Returns a list of SampleValues. A sample without any weight has no
    mean; its value is None.
    """
    _, nbuckets = map_shape(hmap)
    size = _bucket_size(config, nbuckets or 1)
    rval = []
    for i, row in enumerate(hmap):
        weight = sum(row)
        total = sum(value * (config.min_value + (j + 0.5) * size)
                    for j, value in enumerate(row))
        rval.append(SampleValue(config.base + i,
                                total / weight if weight else None))
    return rval


def _sample_percentile(row, p, min_value, size):
    target = p * sum(row)
    cum = 0
    for k, value in enumerate(row):
        if cum + value >= target:
            break
        cum += value
    else:
        # Only reachable through rounding; report the window's top.
        return min_value + len(row) * size
    fraction = (target - cum) / value if value else 0
    return min_value + k * size + fraction * size


def percentile(hmap, config):
    """Find the value at config.percentile of each sample's weight.

    config.percentile is a fraction between 0 and 1. The value is
    interpolated linearly within the bucket where the cumulative weight
    reaches the requested fraction, so 0 yields the window's minimum and 1
    the upper edge of the highest nonempty bucket.
    Returns a list of SampleValues.
    """
    if config.percentile is None:
        raise InvalidConfig('percentile', 'required')
    _, nbuckets = map_shape(hmap)
    size = _bucket_size(config, nbuckets or 1)
    return [SampleValue(config.base + i,
                        _sample_percentile(row, config.percentile,
                                           config.min_value, size))
            for i, row in enumerate(hmap)]


def _cell_total(entries, sample, cell_range):
    low, high = cell_range
    config = BucketConfig(nbuckets=1, min_value=low,
                          max_value=max(low, high) + 1,
                          base=sample, nsamples=1)
    return round_half_up(bucketize(entries, config).map[0][0])


def cell_details(total, x, y, config, elements=None):
    """Look up the weight behind one pixel of a rendered heatmap.

    total and each value of the elements dict are raw series given as
    mappings from absolute sample index to sample (or as SparseSeries).
    config is the GeometryConfig the heatmap was rendered with. The weight
    is rounded to an integer; decomposition holds each element present in
    the cell with a weight of at least 1.
    """
    sample, cell_range = samplerange(x, y, config)
    if isinstance(total, SparseSeries):
        total = total.entries
    rval = _cell_total(total, sample, cell_range)
    decomposition = {}
    if rval != 0:
        for name, series in (elements or {}).items():
            if isinstance(series, SparseSeries):
                series = series.entries
            if not series.get(sample):
                continue
            weight = _cell_total(series, sample, cell_range)
            if weight >= 1:
                decomposition[name] = weight
    return CellDetails(sample, cell_range, rval, decomposition)
