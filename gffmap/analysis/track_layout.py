"""
Assignment of root features to non-overlapping horizontal lanes.
"""

import bisect
import logging
from typing import List

from gffmap.models.genomic import Feature


class Track:
    """A lane holding root features that never overlap each other."""

    def __init__(self, index: int):
        self.index = index
        self.features: List[Feature] = []
        # Start-sorted copies of the lane's intervals. Intervals in a lane
        # are disjoint, so sorting by start also sorts by end.
        self._starts: List[int] = []
        self._ends: List[int] = []

    def __len__(self):
        return len(self.features)

    def __iter__(self):
        return iter(self.features)

    def overlaps(self, feature: Feature) -> bool:
        """Check whether the feature overlaps anything already in the lane."""
        pos = bisect.bisect_left(self._starts, feature.start)
        if pos > 0 and self._ends[pos - 1] >= feature.start:
            return True
        if pos < len(self._starts) and self._starts[pos] <= feature.end:
            return True
        return False

    def add(self, feature: Feature):
        if self.overlaps(feature):
            raise ValueError(f"Feature at line {feature.line_number} overlaps lane {self.index}")
        pos = bisect.bisect_left(self._starts, feature.start)
        self._starts.insert(pos, feature.start)
        self._ends.insert(pos, feature.end)
        self.features.append(feature)

    @property
    def span(self):
        """(min start, max end) of the lane, or None if empty."""
        if not self._starts:
            return None
        return self._starts[0], self._ends[-1]

    @property
    def label(self) -> str:
        if self.features:
            first = self.features[0].attributes
            if first.get('Name') or first.get('ID'):
                return first.get('Name') or first.get('ID')
        return f"Track {self.index + 1}"

    def __repr__(self):
        return f"Track(index={self.index}, features={len(self.features)})"


def organize_into_tracks(features: List[Feature]) -> List[Track]:
    """
    Place features on lanes with greedy first-fit in input order.

    Each feature goes to the first lane with no overlapping feature; a new
    lane is opened when none fits. Input is not sorted, so the lane count is
    an upper bound on the minimum rather than the minimum itself.
    """
    tracks: List[Track] = []

    for feature in features:
        for track in tracks:
            if not track.overlaps(feature):
                track.add(feature)
                break
        else:
            track = Track(len(tracks))
            track.add(feature)
            tracks.append(track)

    logging.info(f"Organized {len(features)} root features into {len(tracks)} tracks")
    return tracks
