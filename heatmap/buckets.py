#!/usr/bin/python3

"""Redistribute range-valued observations into fixed-width buckets.

A series is a sequence of samples; each sample holds observations of the
form ((low, high), value), where the value is spread evenly across the
closed integer range [low, high]. bucketize maps each sample onto nbuckets
buckets covering [min_value, max_value), splitting an observation's value
among the buckets its range overlaps in proportion to the overlap:

    range:   |<------- value ------->|
    buckets: |  0  |  1  |  2  |  3  |  4  |
               ^^^   all   all   ^^
             partial           partial

Values falling outside the bucket window are dropped.
"""

import logging
from collections.abc import Mapping
from math import floor

from heatmap.common import (Bucketization, InvalidRange, InvalidShape,
                            DeductionUnderflow, SparseSeries, map_shape)

logger = logging.getLogger(__name__)

DEDUCT_TOLERANCE = 0.5


def materialize(series, base=None, nsamples=None):
    """Return a series as a dense list of samples.

    A SparseSeries, or a plain mapping accompanied by base and nsamples, is
    expanded to the samples base .. base+nsamples-1, with missing indices
    becoming empty samples. Any other iterable is returned as a list.
    """
    if isinstance(series, SparseSeries):
        base, nsamples, series = series
    elif not isinstance(series, Mapping):
        return list(series)
    if base is None or nsamples is None:
        raise InvalidShape('a sample mapping needs base and nsamples')
    return [series.get(i) or [] for i in range(base, base + nsamples)]


def _observations(sample, index):
    """Unpack a sample's observations, checking each range."""
    for (low, high), value in sample:
        if low > high:
            raise InvalidRange('range [{}, {}] in sample {} is inverted'
                               .format(low, high, index), sample=index)
        yield low, high, value


def resolve_max(samples, max_value=0):
    """Return max_value, or one past the largest high bound if it is 0."""
    if max_value != 0:
        return max_value
    highs = [high for i, sample in enumerate(samples)
             for _, high, _ in _observations(sample, i)]
    return max(highs) + 1 if highs else max_value


def _distribute(buckets, low, high, value):
    """Add value, spread over [low, high) in bucket units, to buckets."""
    nbuckets = len(buckets)
    lowfilled = floor(low) + 1
    highfilled = floor(high)

    if highfilled < lowfilled:
        # The range lies within a single bucket.
        buckets[highfilled] += value
        return

    # The share of value that goes to one completely covered bucket.
    u = value / (high - low)

    # Clip to the bucket window. A high bound inside the last bucket is kept
    # so that its partial share still lands there.
    low = max(low, 0)
    if high >= nbuckets:
        high = nbuckets - 1
    highfilled = min(highfilled, nbuckets)

    if low < lowfilled and lowfilled > 0:
        buckets[lowfilled - 1] += (lowfilled - low) * u
    for k in range(lowfilled, highfilled):
        buckets[k] += u
    if high > highfilled:
        buckets[highfilled] += (high - highfilled) * u


def bucketize(series, config):
    """Bucketize a series according to a BucketConfig.

    series is a list of samples, a SparseSeries, or a plain mapping from
    sample index to sample (which needs config.base and config.nsamples).
    Returns a Bucketization of the map and the max_value actually used; the
    latter differs from config.max_value if that was 0.
    """
    samples = materialize(series, config.base, config.nsamples)
    min_value = config.min_value
    max_value = resolve_max(samples, config.max_value)
    nbuckets = config.nbuckets
    size = (max_value - min_value) / nbuckets
    logger.debug('bucketizing %d samples into %d buckets over [%s, %s)',
                 len(samples), nbuckets, min_value, max_value)

    rval = []
    for i, sample in enumerate(samples):
        buckets = [0] * nbuckets
        for range_low, range_high, value in _observations(sample, i):
            if range_low >= max_value or range_high < min_value:
                continue
            if config.weigh_by_range:
                value *= range_low + (range_high - range_low) / 2
            _distribute(buckets,
                        (range_low - min_value) / size,
                        ((range_high + 1) - min_value) / size,
                        value)
        rval.append(buckets)
    return Bucketization(rval, max_value)


def deduct(total, subtrahend):
    """Subtract one map from another in place.

    Both maps must have been bucketized the same way. Floating point drift
    may leave subtrahend cells slightly above the corresponding totals;
    differences within DEDUCT_TOLERANCE are clamped to zero, anything larger
    raises a DeductionUnderflow.
    """
    shape = map_shape(total, where='total')
    if map_shape(subtrahend, where='subtrahend') != shape:
        raise InvalidShape('cannot deduct a map of shape {} from one of '
                           'shape {}'.format(map_shape(subtrahend), shape),
                           where='subtrahend')
    for i, (row, sub_row) in enumerate(zip(total, subtrahend)):
        for j, (value, sub) in enumerate(zip(row, sub_row)):
            if value < sub - DEDUCT_TOLERANCE:
                raise DeductionUnderflow((i, j), value, sub)
            value -= sub
            if value < 0:
                logger.debug('clamped deduction at (%d, %d) from %s to 0',
                             i, j, value)
                value = 0
            row[j] = value
