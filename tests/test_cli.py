from __future__ import annotations

import allure
import pytest
from click.testing import CliRunner

from camunda_worker import __version__
from camunda_worker import main as cli_main
from camunda_worker.controllers import WorkerCliController
from camunda_worker.gateway import NotFoundError, TransportError
from camunda_worker.models import Variable

pytestmark = [
    allure.epic("Operations"),
    allure.feature("CLI"),
]


@pytest.fixture()
def cli(clean_env, fake_gateway, monkeypatch):
    monkeypatch.setattr(
        cli_main,
        "WORKER_CONTROLLER",
        WorkerCliController(gateway_factory=lambda _settings: fake_gateway),
    )
    return CliRunner()


def test_version_option() -> None:
    result = CliRunner().invoke(cli_main.camunda_worker, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_start_process_sends_business_key_and_variables(cli, fake_gateway) -> None:
    result = cli.invoke(
        cli_main.camunda_worker,
        [
            "start-process",
            "--process-id",
            "invoice",
            "--business-key",
            "12345",
            "--var",
            "customer=acme",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "instance_id=instance-1" in result.output
    assert fake_gateway.started == [
        {
            "process_key": "invoice",
            "business_key": "12345",
            "variables": {"customer": Variable(value="acme", type="String")},
        },
    ]
    assert fake_gateway.closed


def test_start_process_uses_env_process_id(cli, fake_gateway, monkeypatch) -> None:
    monkeypatch.setenv("CAMUNDA_WORKER_PROCESS_ID", "from-env")

    result = cli.invoke(cli_main.camunda_worker, ["start-process"])

    assert result.exit_code == 0, result.output
    assert fake_gateway.started[0]["process_key"] == "from-env"
    assert fake_gateway.started[0]["business_key"] is None


def test_start_process_without_process_id_fails(cli, fake_gateway) -> None:
    result = cli.invoke(cli_main.camunda_worker, ["start-process"])

    assert result.exit_code != 0
    assert "process definition key is required" in result.output
    assert fake_gateway.started == []


def test_start_process_rejects_malformed_variable(cli) -> None:
    result = cli.invoke(
        cli_main.camunda_worker,
        ["start-process", "--process-id", "invoice", "--var", "novalue"],
    )

    assert result.exit_code != 0
    assert "NAME=VALUE" in result.output


def test_start_process_reports_engine_error(cli, fake_gateway) -> None:
    fake_gateway.start_error = NotFoundError("No matching process definition", status_code=404)

    result = cli.invoke(cli_main.camunda_worker, ["start-process", "--process-id", "nope"])

    assert result.exit_code != 0
    assert "No matching process definition" in result.output


def test_worker_once_completes_fetched_tasks(cli, fake_gateway, task_factory) -> None:
    fake_gateway.batches = [[task_factory("t1", "build")]]

    result = cli.invoke(
        cli_main.camunda_worker,
        ["worker", "--once", "--topic", "build", "--lock-duration-ms", "7000"],
    )

    assert result.exit_code == 0, result.output
    assert "fetched=1 dispatched=1 handler_errors=0" in result.output
    assert fake_gateway.completed == [("camunda-worker", "t1", {})]
    request = fake_gateway.fetch_requests[0]
    assert [(topic.name, topic.lock_duration_ms) for topic in request.topics] == [
        ("build", 7000),
    ]


def test_worker_loop_exits_non_zero_on_fetch_failure(cli, fake_gateway) -> None:
    fake_gateway.batches = [TransportError("connection refused")]

    result = cli.invoke(cli_main.camunda_worker, ["worker", "--loop"])

    assert result.exit_code != 0
    assert "fetch failed: connection refused" in result.output
    assert fake_gateway.completed == []
    assert fake_gateway.closed


def test_worker_repeated_topic_is_registered_once(cli, fake_gateway) -> None:
    result = cli.invoke(
        cli_main.camunda_worker,
        ["worker", "--once", "--topic", "build", "--topic", " build ", "--topic", "deploy"],
    )

    assert result.exit_code == 0, result.output
    request = fake_gateway.fetch_requests[0]
    assert [topic.name for topic in request.topics] == ["build", "deploy"]
