#!/usr/bin/env python3
"""
Generate synthetic GFF3 files for gffmap.

Genes are written as gene -> mRNA -> exon/CDS hierarchies. Optionally some
malformed lines can be mixed in, and genes can be made to overlap so that
they spread over several tracks.

Usage:
  python -m gffmap.tools.generate_test_data [options]
"""

import argparse
import logging
import os
import random
import sys

from gffmap.utils.logging import setup_logging

# Lines that fail parsing for different reasons
MALFORMED_TEMPLATES = [
    "{seqid}\tgffmap\tgene\t100\t200\t.\t+\t.",                        # 8 columns
    "{seqid}\tgffmap\tgene\tstart\t200\t.\t+\t.\tID=bad_coord",        # non-integer start
    "{seqid}\tgffmap\tgene\t500\t100\t.\t+\t.\tID=bad_order",          # start > end
    "{seqid}\tgffmap\tgene\t100\t200\t.\tx\t.\tID=bad_strand",         # invalid strand
]


def generate_gff3_lines(sequence_length=10000, num_genes=5, num_exons_per_gene=3, seqid='chr1',
                        malformed_lines=0, overlap=False):
    """Build the lines of a synthetic GFF3 file."""
    lines = ["##gff-version 3", f"##sequence-region {seqid} 1 {sequence_length}"]

    # Leave space between genes unless they should overlap
    gene_length = sequence_length // (num_genes * 2)
    if overlap:
        gene_length *= 3

    for i in range(1, num_genes + 1):
        # Calculate gene position
        gene_start = i * (sequence_length // (num_genes + 1))
        gene_start = max(1, gene_start - gene_length // 2)
        gene_end = min(sequence_length, gene_start + gene_length)

        # Randomly choose strand
        strand = '+' if random.random() > 0.3 else '-'

        gene_id = f"gene{i}"
        lines.append(f"{seqid}\tgffmap\tgene\t{gene_start}\t{gene_end}\t.\t{strand}\t.\t"
                     f"ID={gene_id};Name=gene_{i}")

        mrna_id = f"mRNA{i}"
        lines.append(f"{seqid}\tgffmap\tmRNA\t{gene_start}\t{gene_end}\t.\t{strand}\t.\t"
                     f"ID={mrna_id};Parent={gene_id}")

        # Exons with small gaps between them, CDS matching each exon
        exon_length = (gene_end - gene_start) // num_exons_per_gene
        for j in range(1, num_exons_per_gene + 1):
            exon_start = gene_start + (j - 1) * exon_length
            exon_end = max(exon_start, exon_start + exon_length - 10)

            lines.append(f"{seqid}\tgffmap\texon\t{exon_start}\t{exon_end}\t.\t{strand}\t.\t"
                         f"ID=exon{i}.{j};Parent={mrna_id}")
            lines.append(f"{seqid}\tgffmap\tCDS\t{exon_start}\t{exon_end}\t.\t{strand}\t0\t"
                         f"ID=cds{i}.{j};Parent={mrna_id}")

    for k in range(malformed_lines):
        template = MALFORMED_TEMPLATES[k % len(MALFORMED_TEMPLATES)]
        lines.insert(random.randint(2, len(lines)), template.format(seqid=seqid))

    return lines


def generate_gff3(output_file, sequence_length=10000, num_genes=5, num_exons_per_gene=3, seqid='chr1',
                  malformed_lines=0, overlap=False):
    """Generate a synthetic GFF3 file with gene features."""
    logging.info(f"Generating GFF3 file with {num_genes} genes")

    lines = generate_gff3_lines(sequence_length, num_genes, num_exons_per_gene, seqid,
                                malformed_lines, overlap)
    with open(output_file, 'w') as f:
        f.write("\n".join(lines) + "\n")

    logging.info(f"Generated GFF3 file: {output_file}")
    logging.info(f"  Genes: {num_genes}")
    logging.info(f"  Exons per gene: {num_exons_per_gene}")
    if malformed_lines:
        logging.info(f"  Malformed lines: {malformed_lines}")

    return len(lines)


def main(argv=None):
    """Main function to run the test data generator."""
    parser = argparse.ArgumentParser(description='Generate a synthetic GFF3 file for gffmap.')
    parser.add_argument('--output-dir', default='testdata', help='Output directory for test files')
    parser.add_argument('--prefix', default='test', help='Prefix for output files')
    parser.add_argument('--length', type=int, default=10000, help='Length of the annotated sequence')
    parser.add_argument('--seqid', default='chr1', help='Sequence name written in column 1')
    parser.add_argument('--genes', type=int, default=5, help='Number of genes')
    parser.add_argument('--exons', type=int, default=3, help='Number of exons per gene')
    parser.add_argument('--malformed', type=int, default=0, help='Number of malformed lines to mix in')
    parser.add_argument('--overlap', action='store_true', help='Make neighbouring genes overlap')

    # Debug and logging options
    parser.add_argument('--debug', action='store_true', help='Enable debug output')
    parser.add_argument('--verbose', action='store_true', help='Enable verbose output without full debug')
    parser.add_argument('--log-file', help='Write log to this file')
    parser.add_argument('--seed', type=int, help='Random seed for reproducible data generation')

    args = parser.parse_args(argv)

    setup_logging(debug=args.debug, log_file=args.log_file, verbose=args.verbose)

    if args.seed is not None:
        random.seed(args.seed)
        logging.info(f"Using random seed: {args.seed}")

    if args.genes < 1 or args.exons < 1:
        logging.error("--genes and --exons must be at least 1")
        return 1
    if args.length < args.genes * 2 * args.exons * 10:
        logging.error(f"--length {args.length} is too short for {args.genes} genes with {args.exons} exons")
        return 1

    os.makedirs(args.output_dir, exist_ok=True)
    gff_file = os.path.join(args.output_dir, f"{args.prefix}.gff3")

    try:
        generate_gff3(gff_file, args.length, args.genes, args.exons, args.seqid, args.malformed, args.overlap)
    except OSError as e:
        logging.error(f"Error writing test data: {e}")
        return 1

    print(gff_file)
    return 0


if __name__ == '__main__':
    sys.exit(main())
