#!/usr/bin/python3

"""Colormaps turn normalised maps into RGB pixels.

To render a heatmap, call generate with a OneSeries or ManySeries of maps
normalised by heatmap.normalize and a ColorConfig. The resulting PixelBuffer
can emit pixel rows suitable for a png.Writer.

Each map cell becomes a rectangle of pixels. Samples run left to right and
buckets bottom to top, so bucket 0 (the lowest values) is at the bottom.
"""

import logging
from abc import ABCMeta, abstractmethod
from array import array
from collections import namedtuple
from math import floor
from numbers import Real

from heatmap.common import (ManySeries, InvalidConfig, InvalidShape,
                            DomainError, as_series, check_same_shape,
                            round_half_up)

logger = logging.getLogger(__name__)

BACKGROUND = (0xff, 0xff, 0xff)


def hsv_to_rgb(h, s, v):
    """Convert a colour from HSV to a tuple of 8-bit RGB components.

    h is in degrees from 0 to 360, s and v are between 0 and 1.
    """
    for component, value, domain in (('h', h, (0, 360)), ('s', s, (0, 1)),
                                     ('v', v, (0, 1))):
        if not domain[0] <= value <= domain[1]:
            raise DomainError(component, value, domain)

    if s == 0:
        # Achromatic (grey).
        r = g = b = v
    else:
        h /= 60
        i = floor(h)
        f = h - i
        p = v * (1 - s)
        q = v * (1 - s * f)
        t = v * (1 - s * (1 - f))
        r, g, b = ((v, t, p), (q, v, p), (p, v, t),
                   (p, q, v), (t, p, v), (v, p, q))[i % 6]
    return round_half_up(r * 255), round_half_up(g * 255), \
        round_half_up(b * 255)


def rotate_hues(count, start=21, step=91):
    """Return count hues, each step degrees on from the previous one."""
    return [(start + k * step) % 360 for k in range(count)]


class PixelBuffer(namedtuple('PixelBuffer', 'width height rgb')):
    """A row-major RGB image with three bytes per pixel."""

    __slots__ = ()

    def pixel(self, x, y):
        """Return the (r, g, b) tuple of one pixel."""
        offset = (y * self.width + x) * 3
        return tuple(self.rgb[offset:offset + 3])

    def rows(self):
        """Generate pixel rows to write to a PNG file."""
        stride = self.width * 3
        for y in range(self.height):
            yield array('B', self.rgb[y * stride:(y + 1) * stride])


class ColorMap(metaclass=ABCMeta):
    """The base color map.

    Custom color maps should inherit from this class and override the
    color_cell(self, values) method. render takes care of laying cells out
    on the image.
    """

    def __init__(self, width, height, base=0):
        """Initialise a color map drawing onto a width x height image.

        base is the index of the first sample. It keeps column widths from
        changing as a sliding window of samples moves along.
        """
        self.width = width
        self.height = height
        self.base = base

    @abstractmethod
    def color_cell(self, values):
        """Return the RGB colour of a cell given each map's value there."""
        return NotImplemented

    def render(self, maps):
        """Draw a list of same-shaped normalised maps into a PixelBuffer."""
        nsamples, nbuckets = check_same_shape(maps)
        if not nsamples or not nbuckets:
            raise InvalidShape('cannot render a map of shape {}'
                               .format((nsamples, nbuckets)))
        width, height, base = self.width, self.height, self.base
        bheight = height / nbuckets
        bwidth = width / nsamples
        offset = floor(base * bwidth)
        # Cells may stop short of the right and top edges; those pixels
        # keep the background colour.
        buf = bytearray(bytes(BACKGROUND) * (width * height))
        logger.debug('rendering %d map(s) of %d x %d cells onto %d x %d '
                     'pixels', len(maps), nsamples, nbuckets, width, height)

        for i in range(nsamples):
            wbase = floor((base + i) * bwidth) - offset
            wlimit = min(floor((base + i + 1) * bwidth) - offset, width)
            for j in range(nbuckets):
                jh = nbuckets - j - 1
                hbase = floor(jh * bheight)
                hlimit = min(floor((jh + 1) * bheight), height)
                rgb = self.color_cell([hmap[i][j] for hmap in maps])
                if any(not 0 <= c <= 0xff for c in rgb):
                    raise DomainError('rgb', rgb, (0, 0xff))
                span = bytes(rgb) * (wlimit - wbase)
                for h in range(hbase, hlimit):
                    start = (h * width + wbase) * 3
                    buf[start:start + len(span)] = span
        return PixelBuffer(width, height, buf)


class HSVColorMap(ColorMap):
    """Color cells by hue, one hue per map, saturated by value.

    A cell's normalised value selects its saturation between the two
    saturation bounds. Where several maps overlap, their colours are mixed
    in proportion to each map's share of the cell's combined value.
    """

    def __init__(self, width, height, hues, saturation, value, base=0):
        """Initialise a color map with one hue per map to be rendered."""
        super().__init__(width, height, base)
        self.hues = tuple(hues)
        self.saturation = saturation
        self.value = value

    def color(self, hue, value):
        """Return the colour of a single map's normalised value."""
        if value == 0:
            return BACKGROUND
        if not 0 <= value <= 1:
            raise DomainError('normalized value', value, (0, 1))
        s0, s1 = self.saturation
        return hsv_to_rgb(hue, min(s0 + value * (s1 - s0), s1), self.value)

    def color_cell(self, values):
        """Return the colour of a cell, mixing overlapping maps."""
        if len(values) == 1:
            return self.color(self.hues[0], values[0])
        total = sum(values)
        if total == 0:
            return BACKGROUND
        rgb = [0, 0, 0]
        for hue, value in zip(self.hues, values):
            ratio = value / total
            for c, component in enumerate(self.color(hue, value)):
                rgb[c] += component * ratio
        return tuple(int(c) for c in rgb)

    def render(self, maps):
        """Draw maps, one per hue, into a PixelBuffer."""
        if len(maps) != len(self.hues):
            raise InvalidConfig('hue', '{} hues given for {} maps'
                                .format(len(self.hues), len(maps)))
        return super().render(maps)


def generate(maps, config):
    """Render a OneSeries or ManySeries of normalised maps.

    config is a ColorConfig. Its hue must be a single number for a OneSeries
    and a sequence of numbers, one per map, for a ManySeries.
    Returns a PixelBuffer.
    """
    series = as_series(maps)
    many = isinstance(series, ManySeries)
    if many == isinstance(config.hue, Real):
        raise InvalidConfig('hue', 'expected {} for a {}'.format(
            'one hue per map' if many else 'a single hue',
            type(series).__name__))
    hues = config.hue if many else (config.hue,)
    colormap = HSVColorMap(config.width, config.height, hues,
                           config.saturation, config.value, config.base)
    return colormap.render(series.maps)
