from rich.console import Console
from rich.table import Table

from cycle_stats.domain.run_report import RebuildReport, RunSummary
from cycle_stats.pipeline.verification import VerificationReport

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def print_run_summary(summary: RunSummary) -> None:
    if summary.failed_games:
        status = "[bold yellow]Run complete with failures[/bold yellow]"
    else:
        status = "[bold green]Run complete[/bold green]"
    console.print(f"{status}: season {summary.season}")
    console.print(f"  Games scheduled: {summary.games_scheduled}")
    console.print(f"  Games processed: {summary.games_processed}")
    console.print(f"  Games failed: {summary.games_failed}")
    console.print(f"  Records written: {summary.records_written}")
    console.print(f"  Collisions refused: {summary.collisions}")
    console.print(f"  Same-game refreshes: {summary.refreshes}")
    console.print(f"  Double-headers: {summary.double_headers}")
    console.print(f"  Baseline refreshes: {summary.baseline_refreshes}")
    console.print(f"  Elapsed: {summary.elapsed_seconds:.1f}s")

    if not summary.failed_games:
        return
    table = Table(show_edge=False, pad_edge=False, title="Failed games")
    table.add_column("Game", justify="right")
    table.add_column("Date")
    table.add_column("Stage")
    table.add_column("Reason")
    for failed in summary.failed_games:
        table.add_row(str(failed.game_id), failed.date, failed.stage, f"[red]{failed.reason}[/red]")
    console.print(table)


def print_verification(report: VerificationReport) -> None:
    table = Table(show_edge=False, pad_edge=False, title=f"Season {report.season} records")
    table.add_column("Record")
    table.add_column("Count", justify="right")
    table.add_row("Player game records", str(report.player_game_records))
    table.add_row("Team game records", f"{report.team_game_records} / {report.expected_team_game_records}")
    table.add_row("Games with team records", str(report.games_with_team_records))
    table.add_row("Player season records", str(report.player_season_records))
    table.add_row("Team season records", str(report.team_season_records))
    console.print(table)
    if report.complete:
        console.print("[bold green]All expected team game records present[/bold green]")
    else:
        console.print(f"[bold yellow]Missing {report.missing_team_game_records} team game records[/bold yellow]")


def print_rebuild(report: RebuildReport) -> None:
    if report.succeeded:
        console.print(f"[bold green]Season {report.season} totals rebuilt[/bold green]")
    else:
        console.print(f"[bold yellow]Season {report.season} rebuild incomplete[/bold yellow]")
    console.print(f"  Players rebuilt: {report.players_rebuilt}")
    console.print(f"  Players without qualifying stats: {report.players_skipped}")
    console.print(f"  Teams rebuilt: {report.teams_rebuilt}")
    if report.outcome is not None and report.outcome.error:
        console.print(f"  [red]{report.outcome.error}[/red]")
