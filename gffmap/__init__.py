"""
gffmap - GFF3 Feature Map

Parses GFF3 annotation text into a feature hierarchy, lays root features out
on non-overlapping lanes and renders them through a zoomable viewport.
"""

__version__ = "0.1.0"
