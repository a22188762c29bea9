"""
Data models for GFF3 features and parse results.

Features live in a single append-only list (the arena). Parent and child
links are stored as integer indices into that list.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Union


class Strand(Enum):
    """Strand column values allowed by GFF3."""
    FORWARD = "+"
    REVERSE = "-"
    UNSTRANDED = "."
    UNKNOWN = "?"


@dataclass
class Feature:
    """Represents a genomic feature from a GFF3 file."""
    seqid: str
    source: str
    type: str
    start: int
    end: int
    score: Optional[float]
    strand: Strand
    phase: Optional[int]
    attributes: Dict[str, str] = field(default_factory=dict)
    line_number: Optional[int] = None
    index: int = -1
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)

    @property
    def feature_id(self) -> Optional[str]:
        return self.attributes.get('ID') or None

    @property
    def parent_id(self) -> Optional[str]:
        return self.attributes.get('Parent') or None

    @property
    def display_name(self) -> str:
        return self.attributes.get('Name') or self.attributes.get('ID') or 'Unnamed'

    @property
    def length(self) -> int:
        """Length in bp; coordinates are 1-based and inclusive."""
        return self.end - self.start + 1

    def overlaps(self, start: int, end: int) -> bool:
        """Intervals overlap unless one ends strictly before the other begins."""
        return not (self.end < start or self.start > end)


@dataclass
class ParseIssue:
    """A line-level problem recorded while parsing or linking features."""
    line_number: Optional[int]
    message: str
    line: str = ""
    kind: str = "FormatError"


@dataclass
class Extent:
    """Genomic extent covered by all features."""
    start: int = 0
    end: int = 0

    @property
    def size(self) -> int:
        return self.end - self.start


@dataclass
class ParseStats:
    total_features: int = 0
    root_features: int = 0
    errors: int = 0


@dataclass
class ParseResult:
    """Structured result of parsing one GFF3 text buffer."""
    features: List[Feature] = field(default_factory=list)
    root_features: List[Feature] = field(default_factory=list)
    feature_by_id: Dict[str, Feature] = field(default_factory=dict)
    extent: Extent = field(default_factory=Extent)
    sequences: List[str] = field(default_factory=list)
    feature_types: List[str] = field(default_factory=list)
    errors: List[ParseIssue] = field(default_factory=list)
    stats: ParseStats = field(default_factory=ParseStats)
    total_lines: int = 0
    file_name: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.features

    def parent_of(self, feature: Feature) -> Optional[Feature]:
        if feature.parent is None:
            return None
        return self.features[feature.parent]

    def children_of(self, feature: Feature) -> List[Feature]:
        return [self.features[i] for i in feature.children]

    def iter_descendants(self, feature: Feature) -> Iterator[Feature]:
        """Yield every descendant depth-first, children in file order."""
        stack = list(reversed(feature.children))
        while stack:
            child = self.features[stack.pop()]
            yield child
            stack.extend(reversed(child.children))

    def descendants(self, feature: Feature) -> List[Feature]:
        return list(self.iter_descendants(feature))

    @staticmethod
    def filter_by_type(features: Iterable[Feature], types: Union[str, Iterable[str]]) -> List[Feature]:
        """Return the features whose type is one of the given types."""
        type_set = {types} if isinstance(types, str) else set(types)
        return [f for f in features if f.type in type_set]
