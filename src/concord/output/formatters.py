"""Rich output formatters for the CLI host."""

from __future__ import annotations

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from concord.models.analysis import AnalysisResult, ExplanationQuality, ExplanationSections
from concord.models.config import DisplayMode
from concord.models.response import AIResponse, ErrorKind
from concord.models.session import SessionSnapshot

_STATUS_STYLES = {
    ErrorKind.BACKEND_THROTTLED: "status.throttled",
    ErrorKind.CANCELLED: "status.cancelled",
}


def status_style(response: AIResponse) -> str:
    if response.ok:
        return "status.success"
    return _STATUS_STYLES.get(response.error_kind, "status.failed")


def format_response_panel(response: AIResponse, console: Console) -> None:
    """Display a single backend response in a Rich panel."""
    retries_info = f", {response.retries} retries" if response.retries > 0 else ""
    title = (
        f"{escape(response.display_name)} \\[{response.status_label}] "
        f"({response.latency_ms / 1000:.1f}s, ~{response.token_estimate} tokens{retries_info})"
    )
    body = Markdown(response.text) if response.ok and response.text else (
        escape(response.error_message) or "[dim]No output[/dim]"
    )
    console.print(Panel(body, title=title, border_style=status_style(response), expand=True))


def format_comparison_table(responses: tuple[AIResponse, ...], console: Console) -> None:
    """Display backend responses side by side in a Rich table."""
    table = Table(
        title="Backend Comparison",
        show_header=True,
        header_style="bold",
        expand=True,
        padding=(0, 1),
    )

    table.add_column("Backend", style="bold", width=18)
    table.add_column("Status", width=14)
    table.add_column("Time", width=8, justify="right")
    table.add_column("Tokens", width=8, justify="right")
    table.add_column("Output", ratio=1)

    for response in responses:
        output_text = response.text[:500] if response.ok else response.error_message[:200]
        if len(response.text) > 500:
            output_text += "..."

        table.add_row(
            Text(response.display_name, style="backend"),
            Text(response.status_label, style=status_style(response)),
            f"{response.latency_ms / 1000:.1f}s",
            str(response.token_estimate) if response.ok else "-",
            output_text,
        )

    console.print(table)


def format_analysis(analysis: AnalysisResult, console: Console, title: str = "Analysis") -> None:
    """Display similarity, common points, differences and code summary."""
    lines = [f"[bold]Similarity:[/bold] {analysis.overall_similarity:.0%}"]
    if analysis.summary:
        lines.append(f"\n{escape(analysis.summary)}")

    if analysis.common_points:
        lines.append("\n[bold]Common points[/bold]")
        lines.extend(f"  • {escape(point)}" for point in analysis.common_points)

    if analysis.key_differences:
        lines.append("\n[bold]Key differences[/bold]")
        lines.extend(f"  • {escape(d.aspect)}: {escape(d.description)}" for d in analysis.key_differences)

    if analysis.code_analysis:
        lines.append("\n[bold]Code[/bold]")
        for backend_id, code in analysis.code_analysis.items():
            languages = ", ".join(sorted(code.languages)) or "none"
            lines.append(
                f"  • {backend_id}: {code.block_count} block(s), {languages}, "
                f"{code.complexity.value} complexity"
            )

    if analysis.recommendations:
        lines.append(f"\n[bold]Recommendations[/bold]\n{escape(analysis.recommendations)}")

    console.print(Panel("\n".join(lines), title=title, border_style="blue", expand=True))


def format_snapshot(snapshot: SessionSnapshot, console: Console, mode: DisplayMode) -> None:
    """Render a session snapshot in the requested display mode."""
    console.print(Panel(f"[prompt]{escape(snapshot.prompt)}[/prompt]", title="Prompt", border_style="blue"))

    if mode is DisplayMode.SIDE_BY_SIDE:
        format_comparison_table(snapshot.responses, console)
    elif mode is DisplayMode.UNIFIED:
        for response in snapshot.responses:
            format_response_panel(response, console)
    elif snapshot.failed:
        failed = ", ".join(f"{r.display_name} ({r.status_label})" for r in snapshot.failed)
        console.print(f"[status.failed]Failed:[/status.failed] {failed}")

    if snapshot.analysis is not None:
        format_analysis(snapshot.analysis, console)
    else:
        console.print(f"[dim]Analysis unavailable: {snapshot.analysis_note}[/dim]")

    if snapshot.review is not None:
        format_analysis(snapshot.review, console, title="Review")


def format_explanations(
    sections: dict[str, ExplanationSections],
    qualities: tuple[ExplanationQuality, ...],
    console: Console,
) -> None:
    """Display the explanatory comparison: quality scores then key points."""
    table = Table(title="Explanation Quality", show_header=True, header_style="bold")
    table.add_column("Backend", style="backend")
    table.add_column("Clarity", justify="right")
    table.add_column("Code examples", justify="right")
    table.add_column("Depth")
    for quality in qualities:
        table.add_row(
            quality.backend_id,
            f"{quality.clarity_score}/10",
            str(quality.code_examples),
            quality.depth_level.value,
        )
    console.print(table)

    for backend_id, section in sections.items():
        parts = [escape(section.introduction or "") or "[dim]No introduction[/dim]"]
        if section.key_points:
            parts.append("")
            parts.extend(f"• {escape(point)}" for point in section.key_points)
        console.print(Panel("\n".join(parts), title=backend_id, border_style="dim"))
