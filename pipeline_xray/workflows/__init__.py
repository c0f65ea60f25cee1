"""Workflows: traced decision pipelines and request routing."""

from .base import Workflow, keyword_match, select_workflow
from .catalog_search import CatalogSearchWorkflow, search_catalog

__all__ = [
    "CatalogSearchWorkflow",
    "Workflow",
    "keyword_match",
    "search_catalog",
    "select_workflow",
]
