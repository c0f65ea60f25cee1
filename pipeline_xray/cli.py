"""Command-line entry point: run one request over JSON catalogs and print its trace.

Example:
    pipeline-xray "find a cheap steel bottle" --catalog products.json --output trace.json

Extra catalogs are routed by keyword; the --catalog workflow stays the default:
    pipeline-xray "a blog about rust" --catalog products.json \\
        --route '{"name": "Blog Recommendation", "catalog": "posts.json", "triggers": ["blog", "article", "post"]}'
"""

import asyncio
import json
import sys
from collections.abc import Sequence
from contextlib import ExitStack
from pathlib import Path
from typing import Any

from lmnr import Instruments, Laminar
from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, CliPositionalArg, SettingsConfigDict

from pipeline_xray.logging import get_pipeline_logger, setup_logging
from pipeline_xray.reasoner import OpenAIReasoner, Reasoner
from pipeline_xray.registry import MemoryTraceRegistry
from pipeline_xray.service import XRayService
from pipeline_xray.settings import settings
from pipeline_xray.tracing import Execution
from pipeline_xray.workflows import CatalogSearchWorkflow

logger = get_pipeline_logger(__name__)


class CatalogRoute(BaseModel):
    """A catalog served by its own workflow when the request mentions one of its triggers."""

    model_config = ConfigDict(frozen=True)

    name: str
    catalog: Path
    triggers: tuple[str, ...] = ()
    title_field: str = "title"


class XRayCliOptions(BaseSettings):
    """Run a request through a catalog search workflow and emit the recorded execution."""

    request: CliPositionalArg[str]
    catalog: Path
    workflow_name: str = "Catalog Search"
    output: Path | None = None
    route: list[CatalogRoute] = []

    model_config = SettingsConfigDict(
        frozen=True,
        extra="ignore",
        cli_kebab_case=True,
        cli_prog_name="pipeline-xray",
        cli_use_class_docs_for_groups=True,
    )


def load_catalog(path: Path) -> list[dict[str, Any]]:
    """Read a JSON array of record objects.

    Raises:
        ValueError: If the file does not hold an array of objects.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise ValueError(f"Catalog {path} must be a JSON array of objects")
    return data


def _init_laminar() -> None:
    if settings.lmnr_project_api_key:
        Laminar.initialize(
            project_api_key=settings.lmnr_project_api_key,
            disabled_instruments=[Instruments.OPENAI] if Instruments.OPENAI else [],
            export_timeout_seconds=15,
        )
        logger.info("Laminar tracing initialized.")


async def run_request(opts: XRayCliOptions, reasoner: Reasoner) -> Execution:
    """Run the request on a fresh in-memory registry and return the terminal execution."""
    workflows = [
        CatalogSearchWorkflow(r.name, load_catalog(r.catalog), reasoner, triggers=r.triggers, title_field=r.title_field)
        for r in opts.route
    ]
    workflows.append(CatalogSearchWorkflow(opts.workflow_name, load_catalog(opts.catalog), reasoner))
    service = XRayService(MemoryTraceRegistry(), workflows)
    try:
        return await service.run(opts.request)
    finally:
        await service.aclose()


def main(argv: Sequence[str] | None = None, reasoner: Reasoner | None = None) -> int:
    """Parse arguments, run the request, and write the execution in wire form.

    Returns 0 when the execution completed, 1 when it failed.
    """
    setup_logging()
    _init_laminar()

    opts = XRayCliOptions(_cli_parse_args=list(argv) if argv is not None else True)  # pyright: ignore[reportCallIssue]

    with ExitStack() as stack:
        if settings.lmnr_project_api_key:
            stack.enter_context(Laminar.start_as_current_span(name="pipeline-xray", input=[opts.request]))
        execution = asyncio.run(run_request(opts, reasoner or OpenAIReasoner()))
        if settings.lmnr_project_api_key:
            Laminar.set_span_output(execution.status)

    rendered = json.dumps(execution.to_wire(), indent=2, ensure_ascii=False)
    if opts.output is not None:
        opts.output.write_text(rendered, encoding="utf-8")
        logger.info(f"Execution {execution.execution_id} saved to {opts.output}")
    else:
        sys.stdout.write(rendered + "\n")
    return 0 if execution.status == "completed" else 1


if __name__ == "__main__":
    sys.exit(main())
