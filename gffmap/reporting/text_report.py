"""
Text report summarizing a loaded GFF3 file.
"""

import sys
import logging
from collections import Counter


def generate_parse_report(model, outfile=None, max_warnings=3):
    """Write a summary of the parsed features, lanes and warnings."""
    result = model.result

    # Open output file if specified
    out = open(outfile, 'w') if outfile else sys.stdout

    try:
        out.write(f"# GFF3 Feature Map: {model.file_name or 'unnamed input'}\n")
        out.write("#" + "=" * 79 + "\n\n")

        # Overview
        out.write("## Overview\n")
        out.write("-" * 80 + "\n")
        out.write(f"Region: {result.extent.start:,} - {result.extent.end:,} bp\n")
        out.write(f"Features: {result.stats.total_features}\n")
        out.write(f"Root features: {result.stats.root_features}\n")
        out.write(f"Sequences: {', '.join(result.sequences)}\n")
        out.write(f"Lines read: {result.total_lines}\n\n")

        # Feature type counts in first-seen order
        out.write("## Feature Types\n")
        out.write("-" * 80 + "\n")
        type_counts = Counter(f.type for f in result.features)
        for feature_type in result.feature_types:
            out.write(f"{feature_type}: {type_counts[feature_type]}\n")
        out.write("\n")

        # Lanes
        out.write("## Tracks\n")
        out.write("-" * 80 + "\n")
        out.write(f"Tracks: {len(model.tracks)}\n")
        for track in model.tracks:
            span = track.span
            span_text = f"{span[0]:,}-{span[1]:,}" if span else "empty"
            out.write(f"  {track.index + 1}. {track.label}: {len(track)} feature(s), {span_text}\n")
        out.write("\n")

        # Warnings
        if result.errors:
            out.write("## Parsing Warnings\n")
            out.write("-" * 80 + "\n")
            out.write(f"{len(result.errors)} line(s) had issues but were skipped or kept as roots:\n")
            for issue in result.errors[:max_warnings]:
                out.write(f"  Line {issue.line_number}: {issue.message}\n")
            if len(result.errors) > max_warnings:
                out.write(f"  ... and {len(result.errors) - max_warnings} more\n")
            out.write("\n")
    finally:
        if outfile:
            out.close()
            logging.info(f"Report written to {outfile}")
