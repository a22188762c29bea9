"""
Error and warning classes raised or recorded while loading GFF3 data.

Per-line format errors are caught by the parser and recorded as issues; only
MalformedFileError and EmptyResultError leave the loading stage.
"""


class GFFMapError(Exception):
    """Base class for gffmap errors."""


class FormatError(GFFMapError):
    """A single GFF3 record line could not be parsed."""

    def __init__(self, line_number, cause):
        self.line_number = line_number
        self.cause = cause
        super().__init__(f"Line {line_number}: {cause}")


class ColumnCountError(FormatError):
    """Record line does not have exactly 9 tab-separated columns."""


class CoordinateTypeError(FormatError):
    """Start or end column is not an integer."""


class CoordinateOrderError(FormatError):
    """Start coordinate is greater than end coordinate."""


class StrandError(FormatError):
    """Strand column is not one of +, -, . or ?."""


class NumericFieldError(FormatError):
    """Score or phase column is not numeric (strict mode only)."""


class MalformedFileError(GFFMapError):
    """Too many record lines failed to parse for the file to be usable."""

    def __init__(self, errors, total_lines, max_reported=5):
        self.errors = list(errors)
        self.total_lines = total_lines

        lines = [f"File appears to be malformed. {len(self.errors)} errors found:"]
        for issue in self.errors[:max_reported]:
            lines.append(f"  Line {issue.line_number}: {issue.message}")
        if len(self.errors) > max_reported:
            lines.append(f"  ... and {len(self.errors) - max_reported} more errors")
        super().__init__("\n".join(lines))


class EmptyResultError(GFFMapError):
    """The file parsed cleanly but contains no features."""


class UnresolvedParentWarning(UserWarning):
    """A Parent attribute names an ID that is not present in the file."""


class CyclicParentWarning(UnresolvedParentWarning):
    """Linking a feature to its Parent would create a cycle."""
