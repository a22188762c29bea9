"""
Parser for GFF3 (General Feature Format version 3) files.
"""

import math
import os
import re
import time
import logging
from urllib.parse import unquote

from gffmap.analysis.hierarchy import build_hierarchy, summarize_features
from gffmap.config import BrowserConfig
from gffmap.errors import (
    ColumnCountError,
    CoordinateOrderError,
    CoordinateTypeError,
    FormatError,
    MalformedFileError,
    NumericFieldError,
    StrandError,
)
from gffmap.models.genomic import Feature, ParseIssue, ParseResult, ParseStats, Strand

_INTEGER_RE = re.compile(r'^[+-]?\d+$')
_LINE_SPLIT_RE = re.compile(r'\r?\n')
_STRANDS = {s.value: s for s in Strand}

NUM_COLUMNS = 9


def parse_attributes(attribute_string):
    """
    Parse the attribute column into a key/value mapping.

    Segments are separated by ';' and split on the first '='. Segments without
    '=' are skipped. Values are percent-decoded.
    """
    if not attribute_string or attribute_string == '.':
        return {}

    attributes = {}
    for pair in attribute_string.split(';'):
        pair = pair.strip()
        if not pair:
            continue

        key, sep, value = pair.partition('=')
        if not sep:
            continue

        attributes[key.strip()] = unquote(value.strip())

    return attributes


def _parse_score(token, line_number, strict):
    if token == '.':
        return None
    try:
        return float(token)
    except ValueError:
        if strict:
            raise NumericFieldError(line_number, f"Invalid score '{token}'. Must be a number or .")
        logging.debug(f"Line {line_number}: score '{token}' is not a number, using NaN")
        return math.nan


def _parse_phase(token, line_number, strict):
    if token == '.':
        return None
    if _INTEGER_RE.match(token):
        return int(token)
    if strict:
        raise NumericFieldError(line_number, f"Invalid phase '{token}'. Must be an integer or .")
    logging.debug(f"Line {line_number}: phase '{token}' is not an integer, ignoring it")
    return None


def parse_gff3_line(line, line_number, config=None):
    """
    Parse a single GFF3 line into a Feature.

    Args:
        line: Raw line text
        line_number: 1-based line number used in error messages
        config: Optional BrowserConfig (strict_numeric is honoured)

    Returns:
        Feature, or None for blank and comment lines

    Raises:
        FormatError: If the line is not a valid GFF3 record
    """
    strict = config.strict_numeric if config else False

    line = line.strip()
    if not line or line.startswith('#'):
        return None

    fields = line.split('\t')
    if len(fields) != NUM_COLUMNS:
        raise ColumnCountError(
            line_number, f"Invalid GFF3 format. Expected {NUM_COLUMNS} columns, got {len(fields)}")

    seqid, source, feature_type, start, end, score, strand, phase, attribute_string = fields

    # Validate coordinates
    if not (_INTEGER_RE.match(start.strip()) and _INTEGER_RE.match(end.strip())):
        raise CoordinateTypeError(line_number, "Invalid coordinates. Start and end must be integers.")
    start_pos = int(start)
    end_pos = int(end)
    if start_pos > end_pos:
        raise CoordinateOrderError(
            line_number, f"Invalid coordinates. Start ({start_pos}) cannot be greater than end ({end_pos}).")

    # Validate strand
    if strand not in _STRANDS:
        raise StrandError(line_number, f"Invalid strand value '{strand}'. Must be +, -, ., or ?")

    return Feature(
        seqid=seqid,
        source=source,
        type=feature_type,
        start=start_pos,
        end=end_pos,
        score=_parse_score(score, line_number, strict),
        strand=_STRANDS[strand],
        phase=_parse_phase(phase, line_number, strict),
        attributes=parse_attributes(attribute_string),
        line_number=line_number,
    )


def parse_gff3_text(text, file_name=None, config=None):
    """
    Parse a complete GFF3 text buffer.

    Every line is parsed on its own; failures are collected rather than
    aborting. Once all lines are read, the file is rejected if the share of
    failed lines exceeds the configured threshold.

    Args:
        text: Full file content
        file_name: Optional name of the originating file, kept on the result
        config: Optional BrowserConfig

    Returns:
        ParseResult

    Raises:
        MalformedFileError: If more than malformed_threshold of the lines failed
        TypeError: If text is not a string
    """
    if not isinstance(text, str):
        raise TypeError(f"GFF3 content must be a string, got {type(text).__name__}")
    config = config or BrowserConfig()

    start_time = time.time()
    logging.info(f"Parsing GFF3 content{f' from {file_name}' if file_name else ''}")

    lines = _LINE_SPLIT_RE.split(text)
    features = []
    errors = []

    for line_number, line in enumerate(lines, 1):
        try:
            feature = parse_gff3_line(line, line_number, config)
        except FormatError as e:
            logging.debug(str(e))
            errors.append(ParseIssue(
                line_number=line_number,
                message=e.cause,
                line=line[:config.error_line_length],
                kind=type(e).__name__,
            ))
            continue

        if feature is not None:
            feature.index = len(features)
            features.append(feature)

    # Too many bad lines means this is probably not a GFF3 file
    if errors and len(errors) / len(lines) > config.malformed_threshold:
        raise MalformedFileError(errors, len(lines), config.max_reported_errors)

    if errors:
        logging.warning(f"Skipped {len(errors)} malformed line(s) out of {len(lines)}")

    elapsed = time.time() - start_time
    logging.info(f"Finished parsing GFF3 in {elapsed:.2f}s: {len(features)} features")

    # Build feature hierarchy
    feature_by_id, root_features, warnings = build_hierarchy(features)
    errors.extend(warnings)

    extent, sequences, feature_types = summarize_features(features)

    return ParseResult(
        features=features,
        root_features=root_features,
        feature_by_id=feature_by_id,
        extent=extent,
        sequences=sequences,
        feature_types=feature_types,
        errors=errors,
        stats=ParseStats(
            total_features=len(features),
            root_features=len(root_features),
            errors=len(errors),
        ),
        total_lines=len(lines),
        file_name=file_name,
    )


def parse_gff3(gff_file, config=None):
    """Parse a GFF3 file into a ParseResult."""
    with open(gff_file, 'r') as f:
        content = f.read()
    return parse_gff3_text(content, file_name=os.path.basename(gff_file), config=config)
