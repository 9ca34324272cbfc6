#!/usr/bin/python3

"""Scale bucketized maps to values between 0 and 1.

Maps rendered together must be normalised together, so normalize takes a
OneSeries or a ManySeries and treats all values of all its maps as a single
pool. Zero stays zero in every mode; it is what renders as background.
"""

import logging
from abc import ABCMeta, abstractmethod

from heatmap.common import as_series, check_same_shape
from heatmap.config import NormalizeConfig

logger = logging.getLogger(__name__)


class Normalizer(metaclass=ABCMeta):
    """The base normalizer.

    Subclasses override scale(self, values), which is given every nonzero
    value in the pool and returns a function mapping one of those values to
    its normalised value.
    """

    @abstractmethod
    def scale(self, values):
        """Return a function mapping pool values into (0, 1]."""
        return NotImplemented

    def normalize(self, maps):
        """Normalise a list of same-shaped maps in place."""
        check_same_shape(maps)
        values = [value for hmap in maps for row in hmap for value in row
                  if value != 0]
        logger.debug('normalizing %d nonzero values across %d maps with %s',
                     len(values), len(maps), type(self).__name__)
        transform = self.scale(values)
        for hmap in maps:
            for row in hmap:
                for j, value in enumerate(row):
                    if value != 0:
                        row[j] = transform(value)


class RankNormalizer(Normalizer):
    """Scale values by their rank in the pool rather than their magnitude.

    The largest value maps to 1 and the smallest to 1/n, where n is the
    number of nonzero values. Equal values share the score of the first of
    them in descending order. Ties are found by exact float equality, so
    values that differ only by rounding noise get different ranks.
    """

    def scale(self, values):
        """Return a lookup from each pool value to its rank score."""
        values = sorted(values, reverse=True)
        n = len(values)
        mapping = {}
        for i, value in enumerate(values):
            mapping.setdefault(value, (n - i) / n)
        return mapping.__getitem__


class LinearNormalizer(Normalizer):
    """Scale values linearly by the pool's maximum.

    The divisor is never below 1, so pools of small values are left as they
    are rather than stretched to fill the whole range.
    """

    def scale(self, values):
        """Return a function dividing by the pool's maximum."""
        peak = max(values, default=1)
        peak = max(peak, 1)
        return lambda value: value / peak


NORMALIZERS = {
    'rank': RankNormalizer,
    'linear': LinearNormalizer,
}


def normalize(maps, config=NormalizeConfig()):
    """Normalise a OneSeries or ManySeries in place.

    config is a NormalizeConfig choosing rank (the default) or linear
    scaling.
    """
    NORMALIZERS[config.mode]().normalize(as_series(maps).maps)
