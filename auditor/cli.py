"""
SEO Page Analyzer

Crawls a page with a headless browser, analyzes it with an LLM and prints
a scored report.
"""

import argparse
import asyncio
import json
import logging

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from auditor.config import load_config
from auditor.exceptions import AuditError, ValidationError
from auditor.factory import build_catalog, build_service, build_store
from auditor.jobs.models import JobStatus
from auditor.jobs.state_machine import JobStateMachine
from auditor.logging_setup import setup_logging
from auditor.progress_tracker import ProgressTracker
from auditor.validation import validate_job_id

logger = logging.getLogger(__name__)

console = Console()


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(description="SEO Page Analyzer")
    parser.add_argument("--config", default="config.json", help="Config file path")
    parser.add_argument("--verbose", action="store_true", help="Also log to the console")

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Analyze a URL")
    run_parser.add_argument("url", help="Absolute http(s) URL")
    run_parser.add_argument("--prompts", nargs="+", help="Prompt IDs (default set if omitted)")
    run_parser.add_argument(
        "--poll-interval", type=float, default=0.5, help="Seconds between status polls"
    )

    status_parser = subparsers.add_parser("status", help="Show the status of an analysis")
    status_parser.add_argument("id", help="Analysis ID")

    show_parser = subparsers.add_parser("show", help="Show a stored analysis")
    show_parser.add_argument("id", help="Analysis ID")
    show_parser.add_argument("--json", action="store_true", help="Print the full record as JSON")

    list_parser = subparsers.add_parser("list", help="List analyses")
    list_parser.add_argument("--status", help="Only analyses with this status")
    list_parser.add_argument("--limit", type=int, default=20)

    cancel_parser = subparsers.add_parser("cancel", help="Cancel a running analysis")
    cancel_parser.add_argument("id", help="Analysis ID")

    subparsers.add_parser("prompts", help="List available prompts")

    return parser.parse_args(argv)


async def run_analysis(args, config) -> int:
    # No restart recovery here: a web server may share the store and own running jobs
    service = build_service(config)

    job = await service.submit(args.url, args.prompts)
    logger.info(f"Submitted analysis {job.id} for {job.url}")
    tracker = ProgressTracker(job.url, console)

    try:
        with tracker.progress:
            tracker.start()
            while not job.is_terminal:
                await asyncio.sleep(args.poll_interval)
                job = await service.get_result(job.id)
                tracker.update(job)
        tracker.show_completion_summary(job)

    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info(f"Analysis {job.id} interrupted by user")
        job = await service.cancel(job.id)
        console.print(f"\n[yellow]Analysis {job.id} {job.status.value}[/yellow]")

    finally:
        await service.shutdown()

    return 0 if job.status.value == "completed" else 1


async def show_status(args, jobs: JobStateMachine) -> int:
    job = await jobs.get(validate_job_id(args.id))
    status = job.status_dict()
    table = Table(title=f"Analysis {job.id}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="magenta")
    for key in ("url", "status", "progress", "current_step", "updated_at", "error"):
        if status.get(key) is not None:
            table.add_row(key, str(status[key]))
    console.print(table)
    return 0


async def show_job(args, jobs: JobStateMachine) -> int:
    job = await jobs.get(validate_job_id(args.id))
    if args.json:
        console.print_json(json.dumps(job.to_dict(), ensure_ascii=False))
    else:
        ProgressTracker(job.url, console).show_completion_summary(job)
    return 0


async def list_jobs(args, jobs: JobStateMachine) -> int:
    status = None
    if args.status:
        try:
            status = JobStatus(args.status)
        except ValueError:
            raise ValidationError("status", f"Unknown status '{args.status}'") from None
    table = Table(title="Analyses")
    table.add_column("ID", style="cyan")
    table.add_column("Status")
    table.add_column("Progress", justify="right")
    table.add_column("URL")
    table.add_column("Created")
    for job in await jobs.list_jobs(status, args.limit):
        table.add_row(job.id, job.status.value, f"{job.progress}%", job.url, job.created_at)
    console.print(table)
    return 0


async def cancel_job(args, jobs: JobStateMachine) -> int:
    job = await jobs.cancel(validate_job_id(args.id))
    console.print(f"Analysis {job.id} is {job.status.value}")
    return 0


def list_prompts(config) -> int:
    catalog = build_catalog(config)
    defaults = {spec.id for spec in catalog.list_default()}
    table = Table(title="Prompts")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Default", justify="center")
    for spec in catalog.list_all():
        table.add_row(spec.id, spec.name, spec.category, "✓" if spec.id in defaults else "")
    console.print(table)
    return 0


async def async_main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    config = load_config(args.config)
    setup_logging(config.logging.log_file, config.logging.level, console=args.verbose)

    if args.command == "run":
        return await run_analysis(args, config)
    if args.command == "prompts":
        return list_prompts(config)

    jobs = JobStateMachine(build_store(config))
    if args.command == "status":
        return await show_status(args, jobs)
    if args.command == "show":
        return await show_job(args, jobs)
    if args.command == "list":
        return await list_jobs(args, jobs)
    if args.command == "cancel":
        return await cancel_job(args, jobs)

    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None) -> int:
    """Console script entry point"""
    try:
        return asyncio.run(async_main(argv))
    except AuditError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 2
    except KeyboardInterrupt:
        return 130
