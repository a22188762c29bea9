#!/usr/bin/env python3
"""
gffmap - GFF3 Feature Map

Command-line interface: summarize a GFF3 file, render a snapshot of a region,
open the interactive browser, or generate test data.
"""

import argparse
import logging
import sys

from gffmap import __version__
from gffmap.config import load_config
from gffmap.errors import EmptyResultError, GFFMapError, MalformedFileError
from gffmap.loader import load_gff3
from gffmap.reporting.text_report import generate_parse_report
from gffmap.tools import generate_test_data
from gffmap.utils.logging import setup_logging

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_EMPTY = 3


def parse_region(value):
    """Parse 'START-END' (commas allowed) into a (start, end) tuple."""
    try:
        start, end = value.replace(',', '').split('-', 1)
        start, end = int(start), int(end)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid region '{value}', expected START-END")
    if start > end:
        raise argparse.ArgumentTypeError(f"Invalid region '{value}', start is greater than end")
    return start, end


def add_common_options(parser):
    parser.add_argument('gff_file', help='Input GFF3 file')
    parser.add_argument('--config', help='YAML file with configuration overrides')
    parser.add_argument('--strict-numeric', action='store_true', default=None,
                        help='Treat non-numeric score/phase values as line errors')

    # Debug and logging options
    debug_group = parser.add_argument_group('Debug Options')
    debug_group.add_argument('--debug', action='store_true', help='Enable debug output')
    debug_group.add_argument('--verbose', action='store_true', help='Enable verbose output without full debug')
    debug_group.add_argument('--log-file', help='Write log to this file')


def build_parser():
    parser = argparse.ArgumentParser(description='gffmap - GFF3 Feature Map')
    parser.add_argument('--version', action='version', version=f"gffmap {__version__}")
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    summary_parser = subparsers.add_parser('summary', help='Print a summary of a GFF3 file')
    add_common_options(summary_parser)
    summary_parser.add_argument('--output', '-o', help='Output file (default: stdout)')
    summary_parser.add_argument('--max-warnings', type=int, default=3,
                                help='Number of parsing warnings to list (default: 3)')

    render_parser = subparsers.add_parser('render', help='Render a region of a GFF3 file to an image')
    add_common_options(render_parser)
    render_parser.add_argument('--output', '-o', required=True, help='Output image (png, svg, pdf)')
    render_parser.add_argument('--region', type=parse_region, help='Region to show as START-END')
    render_parser.add_argument('--width', type=int, help='Image width in pixels')
    render_parser.add_argument('--height', type=int, help='Image height in pixels')

    browse_parser = subparsers.add_parser('browse', help='Open the interactive browser')
    add_common_options(browse_parser)

    # Generator options are parsed by the tool itself
    subparsers.add_parser('generate-test-data', add_help=False,
                          help='Generate a synthetic GFF3 file (see generate-test-data --help)')

    return parser


def run(args):
    """Run a parsed command and return the exit code."""
    config = load_config(args.config, overrides={'strict_numeric': args.strict_numeric})
    model = load_gff3(args.gff_file, config)

    if args.command == 'summary':
        generate_parse_report(model, args.output, max_warnings=args.max_warnings)
    elif args.command == 'render':
        from gffmap.render.mpl_surface import save_snapshot
        save_snapshot(model, args.output, region=args.region, width=args.width,
                      height=args.height, config=config)
    elif args.command == 'browse':
        from gffmap.render.mpl_surface import InteractiveBrowser
        InteractiveBrowser(model, config).show()

    return EXIT_OK


def main(argv=None):
    """Main entry point for the gffmap command."""
    argv = sys.argv[1:] if argv is None else list(argv)

    if argv and argv[0] == 'generate-test-data':
        return generate_test_data.main(argv[1:])

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    setup_logging(debug=args.debug, log_file=args.log_file, verbose=args.verbose)

    try:
        return run(args)
    except EmptyResultError as e:
        logging.error(str(e))
        return EXIT_EMPTY
    except MalformedFileError as e:
        logging.error(f"Error parsing GFF3 file:\n{e}")
        return EXIT_ERROR
    except (GFFMapError, OSError, ValueError) as e:
        logging.error(f"Error: {e}")
        if args.debug:
            import traceback
            logging.error(traceback.format_exc())
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
