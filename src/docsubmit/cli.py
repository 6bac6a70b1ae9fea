"""Command-line interface for submitting documents."""

import json
import logging

import click

from . import __version__
from .batch import submit_many
from .client import DocumentClient
from .config import TIME_UNITS, ClientConfig, window_from_unit
from .errors import InvalidConfiguration


@click.group()
@click.version_option(version=__version__, prog_name="docsubmit")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging verbosity (default: WARNING)",
)
def cli(log_level):
    """
    docsubmit - Submit signed JSON documents to an HTTP API.

    Requests are rate limited: at most --limit requests start within any
    window, and extra documents wait for a free slot instead of failing.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.File("r", encoding="utf-8"))
@click.option(
    "--endpoint",
    envvar="DOCSUBMIT_ENDPOINT",
    help="URL documents are POSTed to (or set DOCSUBMIT_ENDPOINT env var)",
)
@click.option(
    "--signature",
    envvar="DOCSUBMIT_SIGNATURE",
    help="Document signature (or set DOCSUBMIT_SIGNATURE env var)",
)
@click.option(
    "--signature-header",
    default="X-Signature",
    help="Header carrying the signature (default: X-Signature)",
)
@click.option(
    "--limit",
    type=int,
    default=1,
    help="Maximum requests per window (default: 1)",
)
@click.option(
    "--time-unit",
    type=click.Choice(list(TIME_UNITS), case_sensitive=False),
    default="second",
    help="Window length as one time unit (default: second)",
)
@click.option(
    "--window",
    type=float,
    help="Window length in seconds; overrides --time-unit",
)
@click.option(
    "--timeout",
    type=float,
    default=30.0,
    help="Per-request timeout in seconds (default: 30)",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=4,
    help="Concurrent submitting threads (default: 4)",
)
@click.option(
    "--no-progress",
    is_flag=True,
    help="Hide the progress bar",
)
def submit(
    files,
    endpoint,
    signature,
    signature_header,
    limit,
    time_unit,
    window,
    timeout,
    workers,
    no_progress,
):
    """
    Submit one JSON document per FILE ("-" reads standard input).

    Response bodies are printed in the order the files were given.

    Examples:

      # Three requests per second
      docsubmit submit doc1.json doc2.json --endpoint https://api.example.com/docs \\
          --signature "$SIG" --limit 3

      # Ten requests per minute, endpoint from the environment
      DOCSUBMIT_ENDPOINT=https://api.example.com/docs docsubmit submit *.json \\
          --signature "$SIG" --limit 10 --time-unit minute
    """
    if not endpoint:
        raise click.UsageError(
            "Endpoint required. Provide --endpoint or set DOCSUBMIT_ENDPOINT."
        )
    if signature is None:
        raise click.UsageError(
            "Signature required. Provide --signature or set DOCSUBMIT_SIGNATURE."
        )

    documents = []
    for handle in files:
        try:
            documents.append(json.load(handle))
        except json.JSONDecodeError as exc:
            raise click.BadParameter(
                f"{handle.name} is not valid JSON: {exc}", param_hint="FILES"
            )

    try:
        config = ClientConfig(
            endpoint=endpoint,
            signature_header=signature_header,
            request_limit=limit,
            window=window if window is not None else window_from_unit(time_unit),
            request_timeout=timeout,
        )
    except InvalidConfiguration as exc:
        raise click.UsageError(str(exc))

    with DocumentClient(config) as client:
        results = submit_many(
            client,
            documents,
            signature,
            workers=workers,
            show_progress=not no_progress,
        )

    failed = 0
    for handle, result in zip(files, results):
        if result.ok:
            click.echo(result.body)
        else:
            failed += 1
            click.echo(f"Error submitting {handle.name}: {result.error}", err=True)

    if failed:
        click.echo(f"{failed} of {len(results)} documents failed", err=True)
        raise click.Abort()


if __name__ == "__main__":
    cli()
