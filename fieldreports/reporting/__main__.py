"""CLI entry point for reporting module."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, time, timezone
from pathlib import Path

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from fieldreports.core.config import settings
from fieldreports.core.exceptions import ReportingError
from fieldreports.core.models import OutputFormat, ReportType
from fieldreports.reporting.datasource import sql_data_source
from fieldreports.reporting.workflow import generate_report


def _parse_date(value: str, end_of_day: bool = False) -> datetime:
    """Accept YYYY-MM-DD or a full ISO timestamp; bare dates are UTC."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r}")
    if len(value) == 10:
        parsed = datetime.combine(parsed.date(), time.max if end_of_day else time.min)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


async def _run(args, console: Console) -> Path:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task(f"Generating {args.format.upper()}...", total=None)
        async with sql_data_source() as data_source:
            rendered = await generate_report(
                args.type,
                args.format,
                _parse_date(args.start),
                _parse_date(args.end, end_of_day=True) if args.end else None,
                data_source=data_source,
            )
        progress.remove_task(task)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_file = output_dir / rendered.filename
    output_file.write_bytes(rendered.content)

    summary = Table(show_header=False, box=None)
    summary.add_row("File", str(output_file))
    summary.add_row("Type", rendered.mime_type)
    summary.add_row("Size", f"{len(rendered.content):,} bytes")
    console.print(summary)
    return output_file


def main():
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description='Generate a field management report',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sales report for January as PDF
  python -m fieldreports.reporting --type sales --format pdf --start 2024-01-01 --end 2024-01-31

  # Leads since the start of the year, as CSV
  python -m fieldreports.reporting --type leads --format csv --start 2024-01-01
        """
    )

    parser.add_argument(
        '--type',
        choices=[t.value for t in ReportType],
        default=ReportType.ACTIVITY.value,
        help='Report type (default: activity)'
    )

    parser.add_argument(
        '--format',
        choices=[f.value for f in OutputFormat],
        default=OutputFormat.PDF.value,
        help='Output format (default: pdf)'
    )

    parser.add_argument(
        '--start',
        required=True,
        help='Start of the date range (YYYY-MM-DD or ISO timestamp)'
    )

    parser.add_argument(
        '--end',
        help='End of the date range (default: now)'
    )

    parser.add_argument(
        '--output-dir',
        default=str(settings.output_dir),
        help=f'Output directory (default: {settings.output_dir})'
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console = Console()
    console.print("\n[bold blue]📊 FIELD REPORTS[/bold blue]\n")

    try:
        asyncio.run(_run(args, console))
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except ReportingError as e:
        console.print(f"[red]Report generation failed: {e}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n\nReport generation cancelled.")
        sys.exit(1)

    console.print("[bold green]✨ Report generation complete![/bold green]\n")


if __name__ == '__main__':
    main()
