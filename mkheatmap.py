#!/usr/bin/python3

"""Script to render range-valued time series as heatmaps.

Each data file holds one series in JSON: either a list of samples, or an
object mapping sample indices to samples (which needs -b/--base and
-N/--nsamples). A sample is a list of [[low, high], value] observations.
"""

import json
import logging
import sys
from argparse import ArgumentParser
from collections import namedtuple
from configparser import ConfigParser, ExtendedInterpolation
from csv import QUOTE_NONNUMERIC, DictWriter as CSVDictWriter

from png import Writer as PNGWriter

from heatmap import (BucketConfig, ColorConfig, ManySeries, NormalizeConfig,
                     OneSeries, QueryConfig, DistributionPoint, SampleValue,
                     HeatmapError, InvalidShape, average, bucketize, deduct,
                     distribution, generate, materialize, normalize,
                     percentile, resolve_max, rotate_hues)

QUERIES = {
    'distribution': (distribution, DistributionPoint),
    'average': (average, SampleValue),
    'percentile': (percentile, SampleValue),
}
DEFAULTS = {
    'nbuckets': '100',
    'width': '1000',
    'height': '300',
    'saturation': '0, 0.9',
    'value': '0.95',
}
# Command-line arguments that override [options] of the same name.
OVERRIDES = ('nbuckets', 'min_value', 'max_value', 'weigh_by_range', 'base',
             'nsamples', 'width', 'height', 'hue', 'saturation', 'value',
             'linear', 'percentile')


def handle_args(custom_args=None):
    """Parse and return the script's command-line arguments using argparse.

    options is the [options] section of the INI file given with -c, on top
    of the built-in defaults. overrides maps option names to the values
    given on the command line, or None where an option wasn't given.
    """
    Args = namedtuple('Args', 'data_files output_file deduct verbose output '
                              'options overrides')
    parser = ArgumentParser(description='Create heatmaps from time series of '
                                        'values observed over ranges.')
    add = parser.add_argument
    add('-f', '--data-file', metavar='FILE', action='append',
        dest='data_files',
        help='A JSON file holding one series. May be given several times to '
             'render series on top of each other. If not given or "-", reads '
             'one series from standard input.')
    add('-o', '--output-file', metavar='FILE',
        help='The file to write the PNG image or CSV results to. Defaults to '
             'stdout.')
    add('-c', '--config', metavar='FILE',
        help='An INI file whose [options] section provides defaults for the '
             'options below, using their long names with underscores (e.g. '
             'min_value). If FILE is -, reads the file from stdin.')
    add('-n', '--nbuckets', metavar='N', type=int,
        help='The number of buckets to divide the value range into. '
             'Defaults to 100.')
    add('-0', '--min-value', metavar='MIN', type=float,
        help='The lowest value covered by the buckets. Defaults to 0.')
    add('-9', '--max-value', metavar='MAX', type=float,
        help='The value just above the highest bucket. If not given, uses '
             'one past the highest value found in the data.')
    add('-r', '--weigh-by-range', action='store_const', const=True,
        help="Weigh each observation by its range's midpoint.")
    add('-b', '--base', metavar='SAMPLE', type=int,
        help='The index of the first sample.')
    add('-N', '--nsamples', metavar='N', type=int,
        help='The number of samples to read from data given as an object.')
    add('-W', '--width', metavar='PIXELS', type=int,
        help='The width of the image. Defaults to 1000.')
    add('-H', '--height', metavar='PIXELS', type=int,
        help='The height of the image. Defaults to 300.')
    add('--hue', metavar='DEGREES', type=float, action='append',
        help='The hue to draw a series in, given once per data file. '
             'Defaults to 21 for the first series and 91 degrees more for '
             'each further one.')
    add('-s', '--saturation', metavar='S0,S1',
        help='The saturation of the smallest and largest values. Defaults '
             'to "0,0.9".')
    add('-V', '--value', metavar='V', type=float,
        help='The HSV value of all colours. Defaults to 0.95.')
    add('--linear', action='store_const', const=True,
        help='Scale colours by value rather than by rank.')
    add('-d', '--deduct', action='store_true',
        help='Treat every series after the first as a part of the first one '
             'and deduct it, so that each part is drawn separately.')
    add('-p', '--percentile', metavar='P', type=float,
        help='The fraction of weight to report the value of, for the '
             'percentile output.')
    add('-v', '--verbose', action='count', default=0,
        help='Log more details. May be given twice.')
    add('output', choices=('png',) + tuple(QUERIES),
        help='Whether to render an image or to compute a statistic.')
    pargs = parser.parse_args(custom_args)

    cfg_parser = ConfigParser(defaults=DEFAULTS,
                              inline_comment_prefixes=('//',),
                              interpolation=ExtendedInterpolation())
    if pargs.config:
        with (open(pargs.config, 'rt') if pargs.config != '-'
              else sys.stdin) as cfg_file:
            cfg_parser.read_file(cfg_file)
    if not cfg_parser.has_section('options'):
        cfg_parser.add_section('options')
    options = cfg_parser['options']

    return Args(
        data_files=pargs.data_files or ['-'],
        output_file=pargs.output_file or options.get('output_file'),
        deduct=pargs.deduct,
        verbose=pargs.verbose,
        output=pargs.output,
        options=options,
        overrides={name: getattr(pargs, name) for name in OVERRIDES},
    )


def bucket_config(args):
    """Return the BucketConfig selected by args."""
    return BucketConfig.from_options(args.options, **args.overrides)


def color_config(args, nmaps):
    """Return the ColorConfig to render nmaps maps with.

    Without any hue option, each map gets its own hue from rotate_hues.
    """
    overrides = dict(args.overrides)
    hues = overrides['hue']
    if hues is None and args.options.get('hue') is None:
        hues = rotate_hues(nmaps)
    if hues is not None:
        overrides['hue'] = hues[0] if len(hues) == 1 else hues
    return ColorConfig.from_options(args.options, **overrides)


def query_config(args, bucketed):
    """Return the QueryConfig over the range the maps were bucketized in."""
    return QueryConfig.from_options(
        args.options, **dict(args.overrides, min_value=bucketed.min_value,
                             max_value=bucketed.max_value))


def read_series(filename):
    """Read one series from a JSON file, or stdin if filename is "-"."""
    with (open(filename, 'rt') if filename != '-'
          else sys.stdin) as data_file:
        data = json.load(data_file)
    if isinstance(data, dict):
        try:
            return {int(index): sample for index, sample in data.items()}
        except ValueError:
            raise InvalidShape('{}: sample indices must be integers'
                               .format(filename), where=filename) from None
    return data


def bucketize_all(series, config):
    """Bucketize every series over one common value range."""
    if not config.max_value:
        config = config._replace(max_value=max(
            resolve_max(materialize(s, config.base, config.nsamples))
            for s in series))
    maps = [bucketize(s, config).map for s in series]
    return maps, config


def write_png(maps, args, outfile):
    """Normalise and render maps, writing them to outfile as a PNG."""
    series = OneSeries(maps[0]) if len(maps) == 1 else ManySeries(maps)
    normalize(series, NormalizeConfig.from_options(args.options,
                                                   **args.overrides))
    pixels = generate(series, color_config(args, len(maps)))
    writer = PNGWriter(width=pixels.width, height=pixels.height,
                       greyscale=False)
    writer.write(outfile, pixels.rows())


def write_query(maps, names, config, query_name, outfile):
    """Run the named query on each map, writing the results as CSV."""
    query, record_type = QUERIES[query_name]
    writer = CSVDictWriter(outfile, fieldnames=(
        ('series',) + record_type._fields), quoting=QUOTE_NONNUMERIC)
    writer.writeheader()
    for name, hmap in zip(names, maps):
        for record in query(hmap, config):
            writer.writerow(dict(record._asdict(), series=name))


def main(custom_args=None):
    """The script's main entry point."""
    args = handle_args(custom_args)
    logging.basicConfig(
        level=(logging.WARNING, logging.INFO, logging.DEBUG)[
            min(args.verbose, 2)],
        format='mkheatmap: %(levelname)s: %(name)s: %(message)s')
    try:
        config = bucket_config(args)
        series = [read_series(f) for f in args.data_files]
        maps, config = bucketize_all(series, config)
        logging.info('bucketized %d series over [%s, %s)', len(maps),
                     config.min_value, config.max_value)
        if args.deduct:
            for part in maps[1:]:
                deduct(maps[0], part)
        if args.output == 'png':
            with (open(args.output_file, 'wb')
                  if args.output_file is not None
                  else sys.stdout.buffer) as outfile:
                write_png(maps, args, outfile)
        else:
            with (open(args.output_file, 'wt', newline='')
                  if args.output_file is not None
                  else sys.stdout) as outfile:
                write_query(maps, args.data_files, query_config(args, config),
                            args.output, outfile)
    except (HeatmapError, json.JSONDecodeError, OSError) as err:
        print('mkheatmap: {}'.format(err), file=sys.stderr)
        return 1
    return 0


def run():
    """Run main, translating interruptions into exit codes."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
    except BrokenPipeError:
        sys.exit(0)     # We were piped into something that crashed.


if __name__ == '__main__':
    run()
