#!/usr/bin/env python3
"""
Test runner for gffmap.

Discovers and runs the unittest suites under tests/. pytest collects the
same suites.
"""

import os
import sys
import unittest
import argparse
import logging

# Tests draw with matplotlib; never open a window
os.environ.setdefault('MPLBACKEND', 'Agg')

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from gffmap.utils.logging import setup_logging


def discover_and_run_tests(test_dir=None, pattern='test_*.py', verbosity=1):
    """Discover and run tests in the specified directory."""
    test_dir = test_dir or os.path.join(PROJECT_ROOT, 'tests')
    logging.info(f"Discovering tests in {test_dir} with pattern {pattern}")

    suite = unittest.TestLoader().discover(test_dir, pattern=pattern, top_level_dir=PROJECT_ROOT)
    return unittest.TextTestRunner(verbosity=verbosity).run(suite)


def run_specific_test(test_path, verbosity=1):
    """Run a single test module given its file path."""
    logging.info(f"Running test file: {test_path}")

    module_name = os.path.splitext(os.path.relpath(os.path.abspath(test_path), PROJECT_ROOT))[0]
    module_name = module_name.replace(os.sep, '.')

    suite = unittest.TestLoader().loadTestsFromName(module_name)
    return unittest.TextTestRunner(verbosity=verbosity).run(suite)


def main():
    """Main function to run tests."""
    parser = argparse.ArgumentParser(description='Run tests for gffmap')
    parser.add_argument('--test-dir', help='Directory containing tests')
    parser.add_argument('--pattern', default='test_*.py', help='Pattern to match test files')
    parser.add_argument('--test-file', help='Run a specific test file')
    parser.add_argument('--verbosity', type=int, default=2, help='Verbosity level (1-3)')
    parser.add_argument('--debug', action='store_true', help='Enable debug output')

    args = parser.parse_args()

    setup_logging(debug=args.debug, verbose=True)

    if args.test_file:
        result = run_specific_test(args.test_file, verbosity=args.verbosity)
    else:
        result = discover_and_run_tests(args.test_dir, args.pattern, verbosity=args.verbosity)

    if result.wasSuccessful():
        logging.info("All tests passed!")
        return 0
    logging.error("Some tests failed.")
    return 1


if __name__ == '__main__':
    sys.exit(main())
