"""
Entry point that turns GFF3 text into a model ready for rendering.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from gffmap.analysis.track_layout import Track, organize_into_tracks
from gffmap.config import BrowserConfig
from gffmap.errors import EmptyResultError
from gffmap.models.genomic import ParseResult
from gffmap.parsers.gff_parser import parse_gff3_text

GFF_EXTENSIONS = ('.gff3', '.gff')


@dataclass
class BrowserModel:
    """Parsed features together with their lane assignment."""
    result: ParseResult
    tracks: List[Track] = field(default_factory=list)
    file_name: Optional[str] = None


def load_gff3_text(text, file_name=None, config=None) -> BrowserModel:
    """
    Parse GFF3 text and lay its root features out on lanes.

    Raises:
        MalformedFileError: If too many lines failed to parse
        EmptyResultError: If the file parsed but contains no features
    """
    config = config or BrowserConfig()

    if file_name and not file_name.lower().endswith(GFF_EXTENSIONS):
        logging.warning(f"{file_name} does not have a .gff3 or .gff extension")

    result = parse_gff3_text(text, file_name=file_name, config=config)

    if result.stats.total_features == 0:
        raise EmptyResultError(
            "No features found in the GFF3 file. The file may be empty or improperly formatted.")

    tracks = organize_into_tracks(result.root_features)

    logging.info(f"GFF3 loaded: {result.stats.total_features} features, "
                 f"{result.stats.root_features} root features, "
                 f"sequences: {', '.join(result.sequences)}, "
                 f"extent: {result.extent.start}-{result.extent.end}")
    if result.errors:
        logging.warning(f"Parsing warnings: {len(result.errors)}")

    return BrowserModel(result=result, tracks=tracks, file_name=file_name)


def load_gff3(gff_file, config=None) -> BrowserModel:
    """Read a GFF3 file from disk and load it."""
    with open(gff_file, 'r') as f:
        content = f.read()
    return load_gff3_text(content, file_name=os.path.basename(gff_file), config=config)
