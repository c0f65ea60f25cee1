"""Pipeline X-Ray - decision tracing for multi-step, LLM-driven pipelines.

Records every intermediate decision of a "search, filter, rank" pipeline as a
hierarchical trace (Execution -> Step -> Artifact/Evaluation) that can be
listed, fetched and followed live while the run is still going.

Quick Start:
    >>> from pipeline_xray import CatalogSearchWorkflow, MemoryTraceRegistry, OpenAIReasoner, XRayService
    >>>
    >>> workflow = CatalogSearchWorkflow("Product Search", products, OpenAIReasoner())
    >>> service = XRayService(MemoryTraceRegistry(), [workflow])
    >>> execution = await service.run("find a cheap steel bottle")
    >>> for step in execution.steps:
    ...     print(step.name, [e.qualified for e in step.evaluations])

Core pieces:
    - Tracer / StepRecorder: record one run step by step
    - MemoryTraceRegistry / watch: shared store with live per-execution updates
    - DynamicFilter: reasoner-generated filter rules with a per-item audit trail
    - XRayService: dispatch requests to workflows and query executions

Environment Variables:
    - OPENAI_BASE_URL / OPENAI_API_KEY: OpenAI-compatible endpoint for OpenAIReasoner
    - REASONER_MODEL: Model name (default: gpt-oss-120b)
    - LMNR_PROJECT_API_KEY: Enables Laminar tracing of reasoner calls
    - XRAY_LOGGING_CONFIG / XRAY_LOG_LEVEL: Logging configuration
"""

from .constants import ArtifactLabel, Criterion, StepName
from .exceptions import (
    InvalidFilterRuleError,
    NoActiveExecutionError,
    ReasonerError,
    StepSealedError,
    TracingError,
    UnknownArtifactError,
    XRayError,
)
from .logging import LoggingConfig, setup_logging
from .logging import get_pipeline_logger as get_logger
from .settings import Settings, settings
from .tracing import (
    Artifact,
    CriterionResult,
    Evaluation,
    Execution,
    ExecutionStatus,
    Step,
    StepRecorder,
    StepType,
    Tracer,
)
from .registry import MemoryTraceRegistry, TraceRegistry, watch
from .filtering import DynamicFilter, FieldSchema, FilterOperator, FilterRule, apply_rules, evaluate_rule, infer_schema
from .reasoner import OpenAIReasoner, Reasoner
from .runtime import RunSupervisor, run_traced
from .workflows import CatalogSearchWorkflow, Workflow, select_workflow
from .service import XRayService

__version__ = "0.1.0"

__all__ = [
    "Artifact",
    "ArtifactLabel",
    "CatalogSearchWorkflow",
    "Criterion",
    "CriterionResult",
    "DynamicFilter",
    "Evaluation",
    "Execution",
    "ExecutionStatus",
    "FieldSchema",
    "FilterOperator",
    "FilterRule",
    "InvalidFilterRuleError",
    "LoggingConfig",
    "MemoryTraceRegistry",
    "NoActiveExecutionError",
    "OpenAIReasoner",
    "Reasoner",
    "ReasonerError",
    "RunSupervisor",
    "Settings",
    "Step",
    "StepName",
    "StepRecorder",
    "StepSealedError",
    "StepType",
    "TraceRegistry",
    "Tracer",
    "TracingError",
    "UnknownArtifactError",
    "Workflow",
    "XRayError",
    "XRayService",
    "apply_rules",
    "evaluate_rule",
    "get_logger",
    "infer_schema",
    "run_traced",
    "select_workflow",
    "settings",
    "setup_logging",
    "watch",
]
