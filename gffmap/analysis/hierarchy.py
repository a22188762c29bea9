"""
Feature hierarchy construction from ID / Parent attributes.
"""

import logging
from typing import Dict, List, Tuple

from gffmap.errors import CyclicParentWarning, UnresolvedParentWarning
from gffmap.models.genomic import Extent, Feature, ParseIssue


def _creates_cycle(features, child_index, parent_index):
    """Check whether linking child -> parent would make the child its own ancestor."""
    current = parent_index
    while current is not None:
        if current == child_index:
            return True
        current = features[current].parent
    return False


def build_hierarchy(features: List[Feature]) -> Tuple[Dict[str, Feature], List[Feature], List[ParseIssue]]:
    """
    Link features into parent/child trees.

    Features must already carry their arena index. The index pass runs before
    any link is resolved, so a child may appear before its parent in the file.

    Args:
        features: Flat feature list in file order

    Returns:
        Tuple of (feature_by_id, root_features, warnings)
    """
    feature_by_id = {}
    root_features = []
    warnings = []

    # First pass: index features by ID, later duplicates win
    for feature in features:
        feature_id = feature.feature_id
        if not feature_id:
            continue
        if feature_id in feature_by_id:
            logging.debug(f"Line {feature.line_number}: duplicate ID '{feature_id}' replaces line "
                          f"{feature_by_id[feature_id].line_number}")
        feature_by_id[feature_id] = feature

    # Second pass: attach children to their parents
    for feature in features:
        parent_id = feature.parent_id
        if not parent_id:
            root_features.append(feature)
            continue

        # Parent values are matched verbatim; a multi-parent list is unresolved
        parent = feature_by_id.get(parent_id)
        label = feature.feature_id or 'unnamed'

        if parent is None:
            message = f"Parent '{parent_id}' not found for feature '{label}'"
            logging.warning(f"Line {feature.line_number}: {message}")
            warnings.append(ParseIssue(feature.line_number, message, kind=UnresolvedParentWarning.__name__))
            root_features.append(feature)
        elif _creates_cycle(features, feature.index, parent.index):
            message = f"Parent '{parent_id}' of feature '{label}' would create a cycle"
            logging.warning(f"Line {feature.line_number}: {message}")
            warnings.append(ParseIssue(feature.line_number, message, kind=CyclicParentWarning.__name__))
            root_features.append(feature)
        else:
            feature.parent = parent.index
            parent.children.append(feature.index)

    return feature_by_id, root_features, warnings


def summarize_features(features: List[Feature]):
    """
    Compute extent, sequence names and feature types over the flat list.

    Returns:
        Tuple of (extent, sequences, feature_types); names are deduplicated in first-seen order
    """
    if not features:
        return Extent(0, 0), [], []

    min_start = min(f.start for f in features)
    max_end = max(f.end for f in features)
    sequences = list(dict.fromkeys(f.seqid for f in features))
    feature_types = list(dict.fromkeys(f.type for f in features))

    return Extent(min_start, max_end), sequences, feature_types
