"""Display names shared by the filtering engine, workflows and run supervision.

These strings are part of the trace wire format read by the dashboard.
"""

from enum import StrEnum


class StepName(StrEnum):
    GENERATION = "Generate Search Keywords"
    SEARCH = "Search Database"
    FILTER = "Apply Intelligent Filters"
    RELEVANCE = "Semantic Relevance Check"
    RANKING = "Final Ranking"
    FAILURE = "Execution Failed"


class ArtifactLabel(StrEnum):
    PROMPT_ANALYSIS = "Prompt Analysis"
    RAW_SEARCH_RESULTS = "Raw Search Results"
    FILTER_LOGIC = "Filter Logic"
    RELEVANCE_SCORES = "Relevance Scores"
    TOP_PICK = "Top Pick"
    ERROR_DETAILS = "Error Details"
    CANDIDATE_EVALUATIONS = "Candidate Evaluations"


class Criterion(StrEnum):
    DATABASE_HIT = "Database Hit"
    FILTER_APPLIED = "Filter Applied"
    EXECUTION_SUCCESS = "Execution Success"
