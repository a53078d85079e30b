"""Command-line interface: ``cpa005 convert payments.xlsx out.txt --mode PAD``."""

from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv

from ach_config import DELIMITERS, ON_INVALID_ROW, options_from_env
from ach_converter import RECORD_MODES, convert_file
from ach_errors import ConversionError
from logging_setup import configure_logging

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Convert a payment sheet (Excel or CSV) into a CPA-005 PAD or PDS file.",
)


@app.callback()
def _root(
    log_level: Optional[str] = typer.Option(
        None, help="Logging level (falls back to CPA005_LOG_LEVEL, then INFO)."
    ),
):
    """Load ``.env`` from the working directory and set up logging."""
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


@app.command("convert")
def convert_cmd(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True,
                                      help="Payment sheet (.xlsx, .xls or .csv)."),
    output_path: Path = typer.Argument(..., dir_okay=False, help="CPA-005 file to write."),
    mode: str = typer.Option("PAD", "--mode", "-m",
                             help="PAD for a debit file, PDS for a credit file."),
    delimiter: Optional[str] = typer.Option(
        None, help=f"Record separator: {', '.join(DELIMITERS)} (default from CPA005_RECORD_DELIMITER or lf)."
    ),
    on_invalid_row: Optional[str] = typer.Option(
        None, help=f"What to do with a malformed row: {' or '.join(ON_INVALID_ROW)}."
    ),
    file_date: Optional[str] = typer.Option(
        None, help="File creation date as YYYY-MM-DD (default today)."
    ),
):
    """Convert INPUT_PATH into a CPA-005 file at OUTPUT_PATH."""
    if mode.strip().upper() not in RECORD_MODES:
        typer.echo(f"Error: --mode must be one of {', '.join(RECORD_MODES)}", err=True)
        raise typer.Exit(2)

    try:
        options = options_from_env(
            on_invalid_row=on_invalid_row.strip().lower() if on_invalid_row else None,
            file_date=datetime.strptime(file_date, "%Y-%m-%d").date() if file_date else None,
        )
        if delimiter is not None:
            options = options.with_delimiter(delimiter)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(2)

    try:
        result = convert_file(input_path, output_path, mode, options)
    except ConversionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(
        f"Wrote {output_path}: {result.total_count} payments, total ${result.total_amount:,.2f}, "
        f"{len(result.suspended_rows)} suspended, {len(result.rejected_rows)} skipped"
    )


if __name__ == "__main__":
    app()
