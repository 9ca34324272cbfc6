#!/usr/bin/python3

"""Render heatmaps from range-valued time series.

Data flows through the submodules in order: heatmap.buckets redistributes
each sample's ((low, high), value) observations into fixed buckets,
optionally deducting one bucketized map from another; heatmap.normalization
scales the maps to [0, 1]; heatmap.colormap renders them into a PixelBuffer
whose rows can be passed to a png.Writer.

The heatmap.query submodule answers questions about a bucketized map
(percentiles, averages, distributions) and maps pixels of a rendered image
back to the sample and value range they show.
"""

from heatmap.buckets import (
    bucketize,
    deduct,
    materialize,
    resolve_max,
)
from heatmap.colormap import (
    ColorMap,
    HSVColorMap,
    PixelBuffer,
    generate,
    hsv_to_rgb,
    rotate_hues,
)
from heatmap.common import (
    Bucketization,
    CellDetails,
    DistributionPoint,
    ManySeries,
    Observation,
    OneSeries,
    Range,
    SampleRange,
    SampleValue,
    SparseSeries,
    DeductionUnderflow,
    DomainError,
    HeatmapError,
    InvalidConfig,
    InvalidRange,
    InvalidShape,
    clone_map,
)
from heatmap.config import (
    BucketConfig,
    ColorConfig,
    GeometryConfig,
    NormalizeConfig,
    QueryConfig,
)
from heatmap.normalization import (
    LinearNormalizer,
    Normalizer,
    RankNormalizer,
    normalize,
)
from heatmap.query import (
    average,
    cell_details,
    distribution,
    percentile,
    samplerange,
)

__all__ = [
    'bucketize',
    'deduct',
    'materialize',
    'resolve_max',
    'ColorMap',
    'HSVColorMap',
    'PixelBuffer',
    'generate',
    'hsv_to_rgb',
    'rotate_hues',
    'Bucketization',
    'CellDetails',
    'DistributionPoint',
    'ManySeries',
    'Observation',
    'OneSeries',
    'Range',
    'SampleRange',
    'SampleValue',
    'SparseSeries',
    'DeductionUnderflow',
    'DomainError',
    'HeatmapError',
    'InvalidConfig',
    'InvalidRange',
    'InvalidShape',
    'clone_map',
    'BucketConfig',
    'ColorConfig',
    'GeometryConfig',
    'NormalizeConfig',
    'QueryConfig',
    'LinearNormalizer',
    'Normalizer',
    'RankNormalizer',
    'normalize',
    'average',
    'cell_details',
    'distribution',
    'percentile',
    'samplerange',
]
