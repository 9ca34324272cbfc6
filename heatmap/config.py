#!/usr/bin/python3

"""Structured configuration for each stage of the heatmap pipeline.

Every config is an immutable namedtuple validated on construction, so an
invalid option surfaces as an InvalidConfig naming the field before any work
is done. Use from_options to build a config from a configparser section, as
the mkheatmap script does for its [options] section.
"""

from collections import namedtuple
from configparser import ConfigParser
from numbers import Real

from heatmap.common import InvalidConfig


def _require(field, value):
    if value is None:
        raise InvalidConfig(field, 'required')
    return value


def _positive_int(field, value):
    _require(field, value)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfig(field, 'expected a positive integer, got {!r}'
                            .format(value))
    return value


def _number(field, value, lo=None, hi=None):
    _require(field, value)
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidConfig(field, 'expected a number, got {!r}'
                            .format(value))
    if (lo is not None and value < lo) or (hi is not None and value > hi):
        raise InvalidConfig(field, '{!r} is outside [{}, {}]'
                            .format(value, lo, hi))
    return value


def _split(value, convert=float):
    """Split comma-separated option strings into a list of numbers."""
    if isinstance(value, str):
        return [convert(v) for v in value.split(',') if v.strip()]
    return value


def _option_value(section, field, kind):
    """Read one option from a configparser section or a dict.

    Strings are converted the way ConfigParser.getint, getfloat and
    getboolean convert them.
    """
    raw = section.get(field)
    if raw is None or not isinstance(raw, str):
        return raw
    try:
        if kind is bool:
            return ConfigParser.BOOLEAN_STATES[raw.strip().lower()]
        if kind is list:
            values = _split(raw)
            return values[0] if len(values) == 1 else values
        return kind(raw)
    except (KeyError, ValueError):
        raise InvalidConfig(field, 'cannot read {!r} as {}'
                            .format(raw, kind.__name__)) from None


class _Config:
    """Mixin building configs from option sections."""

    __slots__ = ()
    _option_kinds = {}

    @classmethod
    def from_options(cls, section, **overrides):
        """Build a config from a configparser section or a dict.

        Values given as keyword arguments take precedence over the section.
        None-valued overrides are ignored, so command-line arguments that
        weren't given fall back to the section and then to the defaults.
        """
        kwargs = {}
        for field in cls._fields:
            value = overrides.get(field)
            if value is None and section is not None:
                value = _option_value(section, field,
                                      cls._option_kinds.get(field, float))
            if value is not None:
                kwargs[field] = value
        return cls(**kwargs)


class BucketConfig(_Config, namedtuple(
        'BucketConfig', 'nbuckets min_value max_value weigh_by_range '
                        'base nsamples')):
    """Options for bucketize.

    max_value == 0 means that the maximum is derived from the data. base and
    nsamples are only needed when bucketizing a plain sample mapping; base
    alone is accepted and ignored for dense series.
    """

    __slots__ = ()
    _option_kinds = {'nbuckets': int, 'weigh_by_range': bool,
                     'base': int, 'nsamples': int}

    def __new__(cls, nbuckets=None, min_value=0, max_value=0,
                weigh_by_range=False, base=None, nsamples=None):
        _positive_int('nbuckets', nbuckets)
        _number('min_value', min_value)
        _number('max_value', max_value)
        if max_value != 0 and max_value <= min_value:
            raise InvalidConfig('max_value', '{} is not above min_value {}'
                                .format(max_value, min_value))
        if nsamples is not None and base is None:
            raise InvalidConfig('base', 'nsamples needs base')
        if nsamples is not None and nsamples < 0:
            raise InvalidConfig('nsamples', 'must not be negative')
        return super().__new__(cls, nbuckets, min_value, max_value,
                               bool(weigh_by_range), base, nsamples)


class NormalizeConfig(_Config, namedtuple('NormalizeConfig', 'rank linear')):
    """Options for normalize. Neither flag set means rank."""

    __slots__ = ()
    _option_kinds = {'rank': bool, 'linear': bool}

    def __new__(cls, rank=False, linear=False):
        if rank and linear:
            raise InvalidConfig('linear', 'rank and linear are exclusive')
        return super().__new__(cls, bool(rank), bool(linear))

    @property
    def mode(self):
        """Return the selected normalization mode's name."""
        return 'linear' if self.linear else 'rank'


class ColorConfig(_Config, namedtuple(
        'ColorConfig', 'width height hue saturation value base')):
    """Options for generate.

    hue is a single number when rendering a OneSeries and a sequence with
    one number per map when rendering a ManySeries.
    """

    __slots__ = ()
    _option_kinds = {'width': int, 'height': int, 'hue': list,
                     'saturation': list, 'base': int}

    def __new__(cls, width=None, height=None, hue=None, saturation=None,
                value=None, base=0):
        _positive_int('width', width)
        _positive_int('height', height)
        _require('hue', hue)
        if isinstance(hue, Real):
            _number('hue', hue, 0, 360)
        else:
            hue = tuple(_number('hue', h, 0, 360) for h in hue)
        saturation = _split(_require('saturation', saturation))
        if len(saturation) != 2:
            raise InvalidConfig('saturation', 'expected two bounds, got {!r}'
                                .format(saturation))
        s0, s1 = (_number('saturation', s, 0, 1) for s in saturation)
        if s0 >= s1:
            raise InvalidConfig('saturation', 'lower bound {} is not below '
                                'upper bound {}'.format(s0, s1))
        _number('value', value, 0, 1)
        _number('base', base)
        return super().__new__(cls, width, height, hue, (s0, s1), value,
                               base)


class GeometryConfig(_Config, namedtuple(
        'GeometryConfig', 'width height nbuckets nsamples min_value '
                          'max_value base')):
    """The rendered image's geometry, used to map pixels back to cells."""

    __slots__ = ()
    _option_kinds = {'width': int, 'height': int, 'nbuckets': int,
                     'nsamples': int, 'base': int}

    def __new__(cls, width=None, height=None, nbuckets=None, nsamples=None,
                min_value=0, max_value=None, base=0):
        _positive_int('width', width)
        _positive_int('height', height)
        _positive_int('nbuckets', nbuckets)
        _positive_int('nsamples', nsamples)
        _number('min_value', min_value)
        _number('max_value', max_value)
        _number('base', base)
        return super().__new__(cls, width, height, nbuckets, nsamples,
                               min_value, max_value, base)


class QueryConfig(_Config, namedtuple(
        'QueryConfig', 'min_value max_value base percentile')):
    """Options for the statistical queries over a bucketized map."""

    __slots__ = ()
    _option_kinds = {'base': int}

    def __new__(cls, min_value=0, max_value=None, base=0, percentile=None):
        _number('min_value', min_value)
        _number('max_value', max_value)
        _number('base', base)
        if percentile is not None:
            _number('percentile', percentile, 0, 1)
        return super().__new__(cls, min_value, max_value, base, percentile)
