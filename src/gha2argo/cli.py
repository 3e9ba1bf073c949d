# cli.py
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from gha2argo.api_client import APIError, ConverterClient
from gha2argo.argo_client import ArgoClient, DocumentSubmitter, SubmitError
from gha2argo.errors import ConversionError
from gha2argo.parser import parse_workflow
from gha2argo.server import settings
from gha2argo.translator import render_document, translate
from gha2argo.ui.console import Console, get_console, set_console

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def read_workflow(workflow_arg: str) -> bytes:
    """
    Read a workflow file ("-" reads stdin).

    Raises:
        SystemExit: If the file does not exist
    """
    console = get_console()

    if workflow_arg == "-":
        return sys.stdin.buffer.read()

    workflow_path = Path(workflow_arg)
    if not workflow_path.exists():
        console.print_error(
            "Workflow file not found",
            f"Could not find workflow file: {workflow_arg}",
            suggestion="Point at a GitHub Actions workflow, e.g.:\n  gha2argo convert .github/workflows/ci.yml",
        )
        sys.exit(1)
    return workflow_path.read_bytes()


def write_output(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        get_console().print_info(f"Wrote {output}")
    else:
        click.echo(text, nl=False)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """gha2argo: convert GitHub Actions workflows to Argo Workflows."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.argument("workflow")
@click.option("-o", "--output", default=None, help="Write Argo YAML here instead of stdout")
@click.option("--submit-to", default=None, help="Argo Server URL to create the workflow on")
@click.option("--namespace", default="argo", show_default=True, help="Namespace for --submit-to")
@click.option("--token", envvar="ARGO_TOKEN", default=None, help="Argo Server bearer token [env: ARGO_TOKEN]")
@click.option("--summary/--no-summary", default=False, help="Print a summary of the generated templates")
@click.pass_context
def convert(ctx, workflow, output, submit_to, namespace, token, summary):
    """Convert a workflow file locally (no server needed)."""
    console = get_console()
    payload = read_workflow(workflow)

    try:
        doc = translate(parse_workflow(payload))
        text = render_document(doc)
    except ConversionError as e:
        console.print_error("Conversion failed", str(e))
        console.print_exception(e)
        sys.exit(1)

    write_output(text, output)
    if summary:
        console.print_conversion_summary(workflow, doc)

    if submit_to:
        console.print_debug(f"Submitting to {submit_to}/api/v1/workflows/{namespace}")
        submitter: DocumentSubmitter = ArgoClient(submit_to, namespace=namespace, token=token)
        try:
            name = submitter.submit(doc.to_dict())
        except SubmitError as e:
            console.print_error(
                "Submission failed",
                str(e),
                suggestion=f"Check the Argo Server at {submit_to} and the --token value.",
            )
            sys.exit(1)
        console.print_workflow_created(name, namespace)


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", default=8080, show_default=True, type=int, help="Port to bind")
@click.option("--workers", default=None, type=int, help=f"Worker threads [default: {settings.NUM_WORKERS}]")
@click.option("--queue-size", default=None, type=int, help=f"Job queue capacity [default: {settings.MAX_QUEUE}]")
@click.option("--log-level", default="info", show_default=True, help="Logging level")
@click.pass_context
def serve(ctx, host, port, workers, queue_size, log_level):
    """Run the conversion HTTP service."""
    import uvicorn

    from gha2argo.server.app import create_app
    from gha2argo.server.service import ConversionService

    console = get_console()
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)

    try:
        service = ConversionService.from_settings(num_workers=workers, max_queue=queue_size)
    except ValueError as e:
        console.print_error("Invalid configuration", str(e))
        sys.exit(1)

    console.print_server_started(
        host=host,
        port=port,
        workers=service.pool.num_workers,
        queue_size=service.queue.capacity,
    )
    # uvicorn exits non-zero by itself if the port cannot be bound
    uvicorn.run(create_app(service), host=host, port=port, log_level=log_level.lower())


@cli.command()
@click.option("--api", required=True, help="Service base URL (e.g., http://localhost:8080)")
@click.argument("workflow")
@click.option("--wait/--no-wait", default=True, help="Wait for the result (sync endpoint) or just queue it")
@click.option("--poll/--no-poll", default=False, help="With --no-wait: poll the result URL until done")
@click.option("--poll-interval", default=1.0, type=float, help="Seconds between polls")
@click.option("-o", "--output", default=None, help="Write Argo YAML here instead of stdout")
@click.pass_context
def submit(ctx, api, workflow, wait, poll, poll_interval, output):
    """Send a workflow to a running gha2argo service."""
    console = get_console()
    payload = read_workflow(workflow)
    client = ConverterClient(api)
    console.print_debug(f"Using service at {client.base_url}")

    try:
        if wait:
            write_output(client.convert(payload), output)
            return

        job_id = client.submit(payload)
        console.print_job_submitted(job_id, f"{client.base_url}/result/{job_id}")
        if poll:
            write_output(client.wait(job_id, poll_interval=poll_interval), output)
    except APIError as e:
        suggestion = None
        if e.status == 503:
            suggestion = "The service queue is full; retry later."
        console.print_error("API request failed", str(e), suggestion=suggestion)
        console.print_exception(e)
        sys.exit(1)


if __name__ == "__main__":
    cli()
