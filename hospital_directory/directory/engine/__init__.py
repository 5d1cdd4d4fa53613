"""Aggregation and cascading-filter engine for the hospital directory."""

from directory.engine.extractor import extract_doctors, extract_treatments, walk_graph
from directory.engine.facets import compute_facets
from directory.engine.filter_state import clear_filters, set_filter_field, set_sort, set_view
from directory.engine.matcher import match_branches
from directory.engine.projector import project
from directory.engine.search_engine import SearchEngine

__all__ = [
    "extract_doctors",
    "extract_treatments",
    "walk_graph",
    "compute_facets",
    "clear_filters",
    "set_filter_field",
    "set_sort",
    "set_view",
    "match_branches",
    "project",
    "SearchEngine",
]
