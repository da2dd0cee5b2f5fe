"""
Rich-based progress tracking for a single analysis
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from auditor.jobs.models import Job


class ProgressTracker:
    """Progress bar driven by polled job status"""

    def __init__(self, url: str, console: Console | None = None):
        self.console = console or Console()
        self.url = url

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TextColumn("•"),
            TimeElapsedColumn(),
            console=self.console,
        )

        self.task_id = None

    def start(self):
        """Initialize progress bar"""
        self.task_id = self.progress.add_task(f"Analyzing {self.url}", total=100)

    def update(self, job: Job):
        if self.task_id is None:
            raise RuntimeError("ProgressTracker not started. Call start() first.")
        self.progress.update(
            self.task_id,
            completed=job.progress,
            description=f"{job.status.value}: {job.current_step}",
        )

    def show_completion_summary(self, job: Job):
        """Show summary after completion"""
        table = Table(title="Analysis Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="magenta")

        table.add_row("Analysis ID", job.id)
        table.add_row("URL", job.url)
        table.add_row("Status", job.status.value)

        if job.error:
            table.add_row("Error", job.error)

        result = job.result
        if result is not None:
            snapshot = result.snapshot
            table.add_row("Title", snapshot.title or "-")
            table.add_row("Language", f"{result.language.name} ({result.language.confidence})")
            table.add_row("Load Time", f"{snapshot.load_time_ms} ms")
            table.add_row(
                "Prompts",
                f"{len(result.outcomes) - len(result.failed_prompts)}/{len(result.outcomes)} succeeded",
            )
            scores = result.scores
            table.add_row("Overall Score", str(scores.overall))
            for name in ("technical", "content", "performance", "user_experience", "accessibility"):
                value = getattr(scores, name)
                label = name.replace("_", " ").title()
                table.add_row(f"  {label}", str(value) if name in scores.measured else "-")
            table.add_row("SEO Checks", str(result.seo_validation.get("overall_score", "-")))
            table.add_row("Recommendations", str(len(result.recommendations)))

        self.console.print(table)

        if result is not None and result.recommendations:
            recs = Table(title="Top Recommendations")
            recs.add_column("Priority", style="red")
            recs.add_column("Category", style="cyan")
            recs.add_column("Recommendation")
            for rec in result.recommendations[:10]:
                recs.add_row(rec.priority, rec.category, rec.title)
            self.console.print(recs)
