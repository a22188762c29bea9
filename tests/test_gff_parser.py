#!/usr/bin/env python3
"""
Tests for the GFF parser functionality.
"""

import math
import os
import tempfile
import unittest

from gffmap.config import BrowserConfig
from gffmap.errors import (
    ColumnCountError,
    CoordinateOrderError,
    CoordinateTypeError,
    MalformedFileError,
    NumericFieldError,
    StrandError,
)
from gffmap.models.genomic import Strand
from gffmap.parsers import gff_parser

GENE_LINE = "chr1\tRefSeq\tgene\t1000\t9000\t.\t+\t.\tID=gene001;Name=BRCA1"


def feature_line(i):
    return f"chr1\ttest\tgene\t{i * 100 + 1}\t{i * 100 + 50}\t.\t+\t.\tID=g{i}"


class LineParserTests(unittest.TestCase):
    """Test cases for single-line parsing."""

    def test_parse_valid_line(self):
        """Test parsing a well-formed record."""
        feature = gff_parser.parse_gff3_line(GENE_LINE, 3)

        self.assertEqual(feature.seqid, 'chr1')
        self.assertEqual(feature.source, 'RefSeq')
        self.assertEqual(feature.type, 'gene')
        self.assertEqual(feature.start, 1000)
        self.assertEqual(feature.end, 9000)
        self.assertIsNone(feature.score)
        self.assertIs(feature.strand, Strand.FORWARD)
        self.assertIsNone(feature.phase)
        self.assertEqual(feature.attributes, {'ID': 'gene001', 'Name': 'BRCA1'})
        self.assertEqual(feature.line_number, 3)
        self.assertEqual(feature.children, [])
        self.assertIsNone(feature.parent)

    def test_blank_and_comment_lines(self):
        """Test that blank and comment lines are ignored."""
        self.assertIsNone(gff_parser.parse_gff3_line("", 1))
        self.assertIsNone(gff_parser.parse_gff3_line("   \t ", 2))
        self.assertIsNone(gff_parser.parse_gff3_line("##gff-version 3", 3))
        self.assertIsNone(gff_parser.parse_gff3_line("# a comment", 4))

    def test_wrong_column_count(self):
        """Test that lines without exactly 9 columns fail."""
        with self.assertRaises(ColumnCountError) as ctx:
            gff_parser.parse_gff3_line("chr1\ttest\tgene\t1\t10\t.\t+\t.", 7)
        self.assertEqual(ctx.exception.line_number, 7)
        self.assertIn("Expected 9 columns, got 8", str(ctx.exception))

        with self.assertRaises(ColumnCountError):
            gff_parser.parse_gff3_line(GENE_LINE + "\textra", 1)

    def test_non_integer_coordinates(self):
        """Test that non-integer coordinates fail."""
        with self.assertRaises(CoordinateTypeError):
            gff_parser.parse_gff3_line("chr1\ttest\tgene\tabc\t10\t.\t+\t.\tID=a", 1)
        with self.assertRaises(CoordinateTypeError):
            gff_parser.parse_gff3_line("chr1\ttest\tgene\t1\t10.5\t.\t+\t.\tID=a", 1)

    def test_start_after_end(self):
        """Test that start > end fails and start == end is accepted."""
        with self.assertRaises(CoordinateOrderError) as ctx:
            gff_parser.parse_gff3_line("chr1\ttest\tgene\t500\t100\t.\t+\t.\tID=a", 9)
        self.assertIn("Start (500) cannot be greater than end (100)", str(ctx.exception))

        feature = gff_parser.parse_gff3_line("chr1\ttest\tSNP\t100\t100\t.\t+\t.\tID=a", 1)
        self.assertEqual(feature.start, feature.end)
        self.assertEqual(feature.length, 1)

    def test_strand_values(self):
        """Test the four allowed strand tokens and a rejected one."""
        expected = {'+': Strand.FORWARD, '-': Strand.REVERSE, '.': Strand.UNSTRANDED, '?': Strand.UNKNOWN}
        for token, strand in expected.items():
            feature = gff_parser.parse_gff3_line(f"chr1\ttest\tgene\t1\t10\t.\t{token}\t.\tID=a", 1)
            self.assertIs(feature.strand, strand)

        with self.assertRaises(StrandError):
            gff_parser.parse_gff3_line("chr1\ttest\tgene\t1\t10\t.\tx\t.\tID=a", 1)

    def test_score_and_phase(self):
        """Test numeric parsing of score and phase."""
        feature = gff_parser.parse_gff3_line("chr1\ttest\tCDS\t1\t10\t3.5\t+\t2\tID=a", 1)
        self.assertEqual(feature.score, 3.5)
        self.assertEqual(feature.phase, 2)

        # Lenient by default
        feature = gff_parser.parse_gff3_line("chr1\ttest\tCDS\t1\t10\thigh\t+\tx\tID=a", 1)
        self.assertTrue(math.isnan(feature.score))
        self.assertIsNone(feature.phase)

    def test_strict_numeric(self):
        """Test that strict mode rejects non-numeric score and phase."""
        config = BrowserConfig(strict_numeric=True)
        with self.assertRaises(NumericFieldError):
            gff_parser.parse_gff3_line("chr1\ttest\tCDS\t1\t10\thigh\t+\t0\tID=a", 1, config)
        with self.assertRaises(NumericFieldError):
            gff_parser.parse_gff3_line("chr1\ttest\tCDS\t1\t10\t.\t+\tx\tID=a", 1, config)


class AttributeParserTests(unittest.TestCase):
    """Test cases for the attribute column."""

    def test_basic_attributes(self):
        attributes = gff_parser.parse_attributes("ID=gene1;Name=test_gene")
        self.assertEqual(attributes, {'ID': 'gene1', 'Name': 'test_gene'})

    def test_empty_attributes(self):
        self.assertEqual(gff_parser.parse_attributes("."), {})
        self.assertEqual(gff_parser.parse_attributes(""), {})

    def test_trimming_and_empty_segments(self):
        attributes = gff_parser.parse_attributes(" ID = gene1 ;; Name=x ; ")
        self.assertEqual(attributes, {'ID': 'gene1', 'Name': 'x'})

    def test_segments_without_equals_are_skipped(self):
        attributes = gff_parser.parse_attributes("ID=gene1;broken;Note=ok")
        self.assertEqual(attributes, {'ID': 'gene1', 'Note': 'ok'})

    def test_split_on_first_equals(self):
        attributes = gff_parser.parse_attributes("Note=a=b")
        self.assertEqual(attributes['Note'], 'a=b')

    def test_percent_decoding(self):
        attributes = gff_parser.parse_attributes("Note=exon%201%2C%20partial%3B%20see%20refs;Alias=100%")
        self.assertEqual(attributes['Note'], 'exon 1, partial; see refs')
        # Malformed escapes are kept as-is
        self.assertEqual(attributes['Alias'], '100%')


class GFFParserTests(unittest.TestCase):
    """Test cases for whole-file parsing."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.output_dir = self.temp_dir.name

        # Create test GFF file
        self.gff_file = os.path.join(self.output_dir, "test.gff3")

        with open(self.gff_file, 'w') as f:
            f.write("##gff-version 3\n")
            f.write("##sequence-region 1 1 1000\n")
            f.write("1\ttest\tgene\t1\t500\t.\t+\t.\tID=gene1;Name=test_gene\n")
            f.write("1\ttest\tmRNA\t1\t500\t.\t+\t.\tID=mRNA1;Parent=gene1\n")
            f.write("1\ttest\texon\t1\t100\t.\t+\t.\tID=exon1;Parent=mRNA1\n")
            f.write("1\ttest\texon\t201\t300\t.\t+\t.\tID=exon2;Parent=mRNA1\n")
            f.write("1\ttest\texon\t401\t500\t.\t+\t.\tID=exon3;Parent=mRNA1\n")
            f.write("1\ttest\tCDS\t1\t100\t.\t+\t0\tID=cds1;Parent=mRNA1\n")
            f.write("1\ttest\tCDS\t201\t300\t.\t+\t0\tID=cds2;Parent=mRNA1\n")
            f.write("1\ttest\tCDS\t401\t500\t.\t+\t0\tID=cds3;Parent=mRNA1\n")

    def tearDown(self):
        """Clean up after tests."""
        self.temp_dir.cleanup()

    def test_parse_gff3(self):
        """Test parsing a GFF3 file."""
        result = gff_parser.parse_gff3(self.gff_file)

        self.assertEqual(len(result.features), 8)  # 1 gene, 1 mRNA, 3 exons, 3 CDS
        self.assertEqual(result.file_name, "test.gff3")
        self.assertEqual(result.errors, [])
        self.assertEqual(result.total_lines, 11)  # includes the empty line after the final newline

        for key in ('gene1', 'mRNA1', 'exon1', 'cds1'):
            self.assertIn(key, result.feature_by_id)

        gene = result.feature_by_id['gene1']
        mrna = result.feature_by_id['mRNA1']
        self.assertEqual([f.feature_id for f in result.children_of(gene)], ['mRNA1'])
        self.assertEqual(len(mrna.children), 6)  # 3 exons + 3 CDS
        self.assertIs(result.parent_of(mrna), gene)

        self.assertEqual(result.root_features, [gene])
        self.assertEqual(result.extent.start, 1)
        self.assertEqual(result.extent.end, 500)
        self.assertEqual(result.sequences, ['1'])
        self.assertEqual(result.feature_types, ['gene', 'mRNA', 'exon', 'CDS'])
        self.assertEqual(result.stats.total_features, 8)
        self.assertEqual(result.stats.root_features, 1)
        self.assertEqual(result.stats.errors, 0)

    def test_features_keep_file_order_and_index(self):
        result = gff_parser.parse_gff3(self.gff_file)
        self.assertEqual([f.index for f in result.features], list(range(8)))
        self.assertEqual([f.line_number for f in result.features], list(range(3, 11)))

    def test_eight_column_line_is_recorded(self):
        """Test that an 8-column line produces exactly one error and no feature."""
        lines = [feature_line(i) for i in range(20)]
        lines.insert(4, "chr1\ttest\tgene\t1\t10\t.\t+\t.")
        result = gff_parser.parse_gff3_text("\n".join(lines))

        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].line_number, 5)
        self.assertEqual(result.errors[0].kind, 'ColumnCountError')
        self.assertEqual(len(result.features), 20)
        self.assertNotIn(5, [f.line_number for f in result.features])

    def test_error_line_is_truncated(self):
        long_line = "chr1\ttest\tgene\t1\t10\t.\t+\t." + "x" * 300
        lines = [feature_line(i) for i in range(20)] + [long_line]
        result = gff_parser.parse_gff3_text("\n".join(lines))

        self.assertEqual(len(result.errors), 1)
        self.assertEqual(result.errors[0].line, long_line[:100])

    def test_threshold_boundary_is_exclusive(self):
        """Test that exactly 10% malformed lines still parses."""
        lines = [feature_line(i) for i in range(9)] + ["not a gff line"]
        result = gff_parser.parse_gff3_text("\n".join(lines))

        self.assertEqual(result.total_lines, 10)
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(len(result.features), 9)

    def test_threshold_exceeded(self):
        """Test that more than 10% malformed lines raises MalformedFileError."""
        lines = [feature_line(i) for i in range(8)] + ["bad line one", "bad line two"]
        with self.assertRaises(MalformedFileError) as ctx:
            gff_parser.parse_gff3_text("\n".join(lines))

        self.assertEqual(len(ctx.exception.errors), 2)
        self.assertEqual(ctx.exception.total_lines, 10)

    def test_malformed_message_lists_first_five(self):
        lines = [feature_line(i) for i in range(3)] + [f"bad line {i}" for i in range(7)]
        with self.assertRaises(MalformedFileError) as ctx:
            gff_parser.parse_gff3_text("\n".join(lines))

        message = str(ctx.exception)
        self.assertIn("7 errors found", message)
        self.assertIn("Line 4:", message)
        self.assertIn("Line 8:", message)
        self.assertNotIn("Line 9:", message)
        self.assertIn("... and 2 more errors", message)

    def test_invalid_file(self):
        """Test parsing a file that is not GFF3 at all."""
        invalid_gff = os.path.join(self.output_dir, "invalid.gff3")
        with open(invalid_gff, 'w') as f:
            f.write("This is not a valid GFF3 file\n")

        with self.assertRaises(MalformedFileError):
            gff_parser.parse_gff3(invalid_gff)

    def test_empty_content(self):
        result = gff_parser.parse_gff3_text("##gff-version 3\n")
        self.assertTrue(result.is_empty)
        self.assertEqual(result.extent.start, 0)
        self.assertEqual(result.extent.end, 0)
        self.assertEqual(result.root_features, [])

    def test_non_string_input(self):
        with self.assertRaises(TypeError):
            gff_parser.parse_gff3_text(None)

    def test_windows_line_endings(self):
        text = "##gff-version 3\r\n" + GENE_LINE + "\r\n"
        result = gff_parser.parse_gff3_text(text)
        self.assertEqual(len(result.features), 1)
        self.assertEqual(result.features[0].attributes['Name'], 'BRCA1')

    def test_missing_parent(self):
        """Test parsing a GFF3 file with missing parent references."""
        lines = [feature_line(i) for i in range(5)]
        lines.append("chr1\ttest\texon\t1\t100\t.\t+\t.\tID=exon1;Parent=missingID")
        result = gff_parser.parse_gff3_text("\n".join(lines))

        exon = result.feature_by_id['exon1']
        self.assertIn(exon, result.root_features)
        self.assertIsNone(exon.parent)
        warnings = [e for e in result.errors if e.kind == 'UnresolvedParentWarning']
        self.assertEqual(len(warnings), 1)
        self.assertEqual(warnings[0].line_number, 6)
        self.assertIn("missingID", warnings[0].message)
        self.assertEqual(result.stats.errors, 1)

    def test_no_parents_means_all_roots(self):
        lines = [feature_line(i) for i in range(10)]
        result = gff_parser.parse_gff3_text("\n".join(lines))

        self.assertEqual(len(result.root_features), len(result.features))
        self.assertTrue(all(f.children == [] for f in result.features))


if __name__ == '__main__':
    unittest.main()
