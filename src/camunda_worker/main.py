"""CLI entrypoint for camunda-worker."""

import logging
from collections.abc import Callable

import rich_click as click

from camunda_worker import __version__
from camunda_worker.controllers import (
    CommandResult,
    StartProcessCommand,
    WorkerCliController,
    WorkerCommand,
)

click.rich_click.USE_MARKDOWN = True
WORKER_CONTROLLER = WorkerCliController()
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@click.group()
@click.version_option(version=__version__, prog_name="camunda-worker")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Logging level for worker diagnostics.",
)
def camunda_worker(log_level: str) -> None:
    """External task worker for a Camunda-style process engine."""

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@camunda_worker.command("start-process")
@click.option(
    "--process-id",
    default=None,
    help="Process definition key. If omitted, CAMUNDA_WORKER_PROCESS_ID is used.",
)
@click.option("--business-key", default=None, help="Business key for the new instance.")
@click.option(
    "--var",
    "variables",
    multiple=True,
    callback=lambda _ctx, _param, values: tuple(_parse_variable(value) for value in values),
    help="String process variable as NAME=VALUE. Can be repeated.",
)
def start_process(
    process_id: str | None,
    business_key: str | None,
    variables: tuple[tuple[str, str], ...],
) -> None:
    """Start one process instance."""

    _emit_result(
        _run(
            lambda: WORKER_CONTROLLER.start_process(
                StartProcessCommand(
                    process_key=process_id,
                    business_key=business_key,
                    variables=variables,
                ),
            ),
        ),
    )


@camunda_worker.command("worker")
@click.option(
    "--topic",
    "topics",
    multiple=True,
    help="Topic to subscribe to. Can be repeated. Defaults to CAMUNDA_WORKER_TOPICS.",
)
@click.option(
    "--lock-duration-ms",
    type=click.IntRange(min=1),
    default=None,
    help="Lock duration for every subscribed topic.",
)
@click.option(
    "--once/--loop",
    default=False,
    show_default=True,
    help="Run one poll cycle or listen until interrupted.",
)
def worker(topics: tuple[str, ...], lock_duration_ms: int | None, once: bool) -> None:
    """Run the external task worker; each task is completed immediately."""

    _emit_result(
        _run(
            lambda: WORKER_CONTROLLER.run_worker(
                WorkerCommand(
                    topics=_unique_topics(topics),
                    lock_duration_ms=lock_duration_ms,
                    once=once,
                ),
            ),
        ),
    )


def _parse_variable(raw: str) -> tuple[str, str]:
    name, separator, value = raw.partition("=")
    if not separator or not name.strip():
        raise click.BadParameter(f"Expected NAME=VALUE, got {raw!r}.")
    return name.strip(), value


def _unique_topics(topics: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(topic.strip() for topic in topics if topic.strip()))


def _run(action: Callable[[], CommandResult]) -> CommandResult:
    try:
        return action()
    except ValueError as error:
        raise click.ClickException(str(error)) from error


def _emit_result(result: CommandResult) -> None:
    for line in result.lines:
        click.echo(line)
    if not result.success:
        raise click.ClickException("Engine request failed.")


if __name__ == "__main__":  # pragma: no cover
    camunda_worker()
