"""
Command-line interface: ``bedunion unionbedg`` and ``bedunion random``.
"""
import logging
import sys
from argparse import ArgumentParser, Namespace
from typing import Optional, Sequence

import numpy as np

from bedunion import RESOURCES
from bedunion.engines.union import BedGraphUnion
from bedunion.genome import GenomeSizes, GenomeError
from bedunion.io import BedGraphError
from bedunion.io.bedgraph import BedGraphReader, BedGraphWriter
from bedunion.utils import UnionConfig, RandomConfig


# Constants ------------------------------------------------------------------------------------------------------------
_LOG = logging.getLogger(__name__)
_LOG_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'


# Functions ------------------------------------------------------------------------------------------------------------
def setup_logging(verbose: bool = False) -> logging.Logger:
    """Logs to stderr and routes library warnings through the logging system."""
    logging.basicConfig(stream=sys.stderr, level=logging.DEBUG if verbose else logging.INFO, format=_LOG_FORMAT)
    logging.captureWarnings(True)
    return logging.getLogger(RESOURCES.package)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog=RESOURCES.package, description='bedtools-style operations on bedGraph files.')
    parser.add_argument('--version', action='version', version=f'%(prog)s {RESOURCES.version}')
    subparsers = parser.add_subparsers(dest='command', metavar='<command>')

    union = subparsers.add_parser('unionbedg', help='Combines multiple bedGraph files into a single file.',
                                  description='Combines multiple bedGraph files into a single file.')
    union.add_argument('-i', '--input', nargs='+', required=True, metavar='FILE',
                       help="Input bedGraph files. Input files cannot contain overlapping intervals and should be "
                            "sorted by chrom, start (use 'sort -k1,1 -k2,2n').")
    union.add_argument('--filler', default='0', metavar='TEXT',
                       help="Use TEXT when representing intervals having no value. [Default: '0']")
    union.add_argument('--empty', action='store_true',
                       help="Report empty regions (i.e. start/end intervals with no values in any file). "
                            "Requires '-g FILE'.")
    union.add_argument('-g', '--genome', metavar='FILE', help='Use genome file FILE to calculate empty regions.')
    union.add_argument('--header', action='store_true', help='Print a header line (chrom/start/end + names).')
    union.add_argument('--names', nargs='+', metavar='NAME',
                       help='Names for the value columns in the header line, in input order. Implies --header.')
    union.add_argument('-o', '--output', default='-', metavar='FILE', help='Output file [Default: stdout]')
    union.add_argument('-v', '--verbose', action='store_true', help='Log debug messages.')
    union.set_defaults(func=run_union, config=UnionConfig)

    random = subparsers.add_parser('random', help='Generates random BED intervals.',
                                   description='Generates random intervals of a fixed length within a genome.')
    random.add_argument('-g', '--genome', required=True, metavar='FILE', help='Genome file with chromosome sizes.')
    random.add_argument('-l', '--length', type=int, default=100, metavar='N', help='Interval length [Default: 100]')
    random.add_argument('-n', '--number', type=int, default=1_000_000, metavar='N',
                        help='Number of intervals [Default: 1,000,000]')
    random.add_argument('-s', '--seed', type=int, metavar='SEED', help='Random seed [Default: unseeded]')
    random.add_argument('-o', '--output', default='-', metavar='FILE', help='Output file [Default: stdout]')
    random.add_argument('-v', '--verbose', action='store_true', help='Log debug messages.')
    random.set_defaults(func=run_random, config=RandomConfig)
    return parser


def run_union(config: UnionConfig) -> int:
    """Runs ``unionbedg``, returning the number of records written."""
    genome = GenomeSizes.from_file(config.genome) if config.genome else None
    readers = []
    try:
        for file in config.input:
            readers.append(BedGraphReader(file))
            _LOG.debug('Opened %s', file)
        with BedGraphUnion(readers, config.filler, config.empty) as union:
            records = genome.pad_empty(union, len(union), union.filler) if config.empty else union
            with BedGraphWriter(config.output, header=config.column_names) as writer:
                return writer.write_all(records)
    finally:
        for reader in readers: reader.close()


def run_random(config: RandomConfig) -> int:
    """Runs ``random``, returning the number of intervals written."""
    genome = GenomeSizes.from_file(config.genome)
    rng = RESOURCES.rng if config.seed is None else np.random.default_rng(config.seed)
    with BedGraphWriter(config.output) as writer:
        return writer.write_all(genome.random(rng, config.number, config.length))


def _validate(parser: ArgumentParser, args: Namespace):
    if args.command == 'unionbedg':
        if args.empty and not args.genome: parser.error("'--empty' requires '-g/--genome'")
        if args.names and len(args.names) != len(args.input):
            parser.error(f"'--names' got {len(args.names)} names for {len(args.input)} input files")
    elif args.command == 'random':
        if args.length < 1: parser.error("'-l/--length' must be positive")
        if args.number < 0: parser.error("'-n/--number' must not be negative")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Entry point for the command-line interface.

    Args:
        argv: Arguments, excluding the program name (defaults to ``sys.argv[1:]``).

    Returns:
        The process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help(sys.stderr)
        return 1
    _validate(parser, args)
    log = setup_logging(args.verbose)
    config = args.config.from_args(args)
    try: n = args.func(config)
    except (BedGraphError, GenomeError, OSError, ModuleNotFoundError) as e:
        log.error(str(e))
        return 1
    log.info('Wrote %d records', n)
    return 0
