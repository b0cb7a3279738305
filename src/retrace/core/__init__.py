"""Core processing algorithms for retrace.

This module contains the core algorithms for:

- Contour extraction (pixel outlines and skeleton centerlines)
- Contour analysis (nesting of outers and holes)
- Polygon preparation (subdivision, simplification, corner detection)
- Curve fitting (cubic Bezier least squares)

All services are designed to be:
- Stateless (safe for use in worker processes)
- Pure (no side effects)

Key functions:
- signed_area: Calculate polygon area using shoelace formula
- point_in_polygon: Test if point is inside polygon
- subdivide: Insert edge midpoints
- simplify: Remove vertices within a tolerance
- classify_points: Tag each vertex HARD or SMOOTH
- fit: Fit cubic Bezier segments to a polyline
- process_contour: Fit one serialized contour (worker entry point)

Key classes:
- ContourTracer: Extracts contours from a PixelGrid
- CornerClassifier: Tags the vertices of a contour
- ContourAnalyzer: Builds the contour nesting hierarchy
- TracePipeline: Runs the whole workflow
"""

from retrace.core.analyzer import ContourAnalyzer, ContourHierarchy, ContourNode
from retrace.core.corners import CornerClassifier, classify_points, corner_indices
from retrace.core.fitting import fit
from retrace.core.geometry import (
    nearest_point_on_segment,
    point_in_polygon,
    signed_area,
    subdivide,
    subdivide_to_limit,
    turn_deviation,
)
from retrace.core.pipeline import TracePipeline, TraceResult, process_contour
from retrace.core.simplify import simplify
from retrace.core.tracer import ContourTracer

__all__ = [
    # Analyzer classes
    "ContourAnalyzer",
    "ContourHierarchy",
    "ContourNode",
    # Corner classification
    "CornerClassifier",
    "classify_points",
    "corner_indices",
    # Tracing
    "ContourTracer",
    # Pipeline
    "TracePipeline",
    "TraceResult",
    "process_contour",
    # Fitting
    "fit",
    "simplify",
    # Geometry functions
    "nearest_point_on_segment",
    "point_in_polygon",
    "signed_area",
    "subdivide",
    "subdivide_to_limit",
    "turn_deviation",
]
