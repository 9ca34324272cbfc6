#!/usr/bin/python3

"""Records, errors and shape checks shared by the heatmap submodules.

A Map is a list of samples, each a list of nbuckets floats. Maps are plain
lists so that they serialise to JSON unchanged; deduct and normalize mutate
them in place, so use clone_map to keep an untouched copy.
"""

from collections import namedtuple
from math import floor


Range = namedtuple('Range', 'low high')
Observation = namedtuple('Observation', 'range value')
Bucketization = namedtuple('Bucketization', 'map max_value')
SampleRange = namedtuple('SampleRange', 'sample range')
SampleValue = namedtuple('SampleValue', 'sample value')
DistributionPoint = namedtuple('DistributionPoint', 'center total')
CellDetails = namedtuple('CellDetails', 'sample range total decomposition')


class SparseSeries(namedtuple('SparseSeries', 'base nsamples entries')):
    """Samples keyed by absolute sample index.

    Only the indices base .. base+nsamples-1 are used; missing ones are
    treated as empty samples when the series is materialised.
    """

    __slots__ = ()


class OneSeries(namedtuple('OneSeries', 'map')):
    """A single map, rendered with a single hue."""

    __slots__ = ()

    @property
    def maps(self):
        """Return the map wrapped in a one-element list."""
        return [self.map]


class ManySeries(namedtuple('ManySeries', 'maps')):
    """Several maps of identical shape, rendered on top of each other."""

    __slots__ = ()


class HeatmapError(ValueError):
    """Base class of all errors raised for invalid input."""


class InvalidShape(HeatmapError):
    """Maps don't have the shape they are required to have."""

    def __init__(self, message, where=None):
        super().__init__(message)
        self.where = where


class InvalidRange(HeatmapError):
    """An observation's range has its low bound above its high bound."""

    def __init__(self, message, sample=None):
        super().__init__(message)
        self.sample = sample


class InvalidConfig(HeatmapError):
    """A config field is missing or holds an unusable value."""

    def __init__(self, field, message):
        super().__init__('{}: {}'.format(field, message))
        self.field = field


class DeductionUnderflow(HeatmapError):
    """A subtrahend cell exceeds the total beyond the allowed tolerance."""

    def __init__(self, cell, total, subtrahend):
        super().__init__('cannot deduct {} from {} at (sample, bucket) = {}'
                         .format(subtrahend, total, cell))
        self.cell = cell


class DomainError(HeatmapError):
    """A colour component lies outside its domain."""

    def __init__(self, component, value, domain):
        super().__init__('{} == {}, expected a value in [{}, {}]'
                         .format(component, value, *domain))
        self.component = component


def as_series(maps):
    """Return maps as a OneSeries or ManySeries, or raise a TypeError."""
    if isinstance(maps, (OneSeries, ManySeries)):
        return maps
    raise TypeError('expected OneSeries or ManySeries, got {}'
                    .format(type(maps).__name__))


def map_shape(hmap, where='map'):
    """Return (nsamples, nbuckets) of a map, checking all rows agree."""
    nsamples = len(hmap)
    nbuckets = len(hmap[0]) if nsamples else 0
    for i, row in enumerate(hmap):
        if len(row) != nbuckets:
            raise InvalidShape('{} sample {} has {} buckets, expected {}'
                               .format(where, i, len(row), nbuckets),
                               where=(where, i))
    return nsamples, nbuckets


def check_same_shape(maps):
    """Return the common shape of several maps or raise InvalidShape."""
    shape = None
    for m, hmap in enumerate(maps):
        this_shape = map_shape(hmap, where='map {}'.format(m))
        if shape is None:
            shape = this_shape
        elif this_shape != shape:
            raise InvalidShape('map {} has shape {}, expected {}'
                               .format(m, this_shape, shape), where=m)
    if shape is None:
        raise InvalidShape('no maps given')
    return shape


def clone_map(hmap):
    """Copy a map so it can be mutated without touching the original."""
    return [list(row) for row in hmap]


def round_half_up(x):
    """Round to the nearest integer, with halves rounded towards +inf.

    Pixel colours and value ranges use this rather than round(), whose ties
    go to the nearest even number.
    """
    return floor(x + 0.5)
