"""Tests for the stats-agent command-line interface."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from typer.testing import CliRunner

from stats_agent import __version__
from stats_agent.cli.main import app
from stats_agent.errors import CollaboratorError, CollaboratorUnavailableError, InvalidRequestError
from stats_agent.schemas import OrchestrationResponse, VerifiedStatistic

runner = CliRunner()


def response(names: list[str], target: int) -> OrchestrationResponse:
    statistics = [
        VerifiedStatistic(
            name=name,
            value=59.7,
            unit="%",
            source="Pew Research Center",
            source_url="https://www.pewresearch.org/internet/2024/teens",
            excerpt=f"{name}: 59.7%",
            verified=True,
        )
        for name in names
    ]
    return OrchestrationResponse(
        topic="teen social media use",
        statistics=statistics,
        total_candidates=len(names) + 1,
        failed_count=1,
        target_count=target,
        attempts=1,
    )


@pytest.fixture
def orchestrator(monkeypatch) -> AsyncMock:
    """Replace OrchestratorClient with an async-context-manager mock."""
    client = AsyncMock()
    client.__aenter__.return_value = client
    client.__aexit__.return_value = False
    factory = MagicMock(return_value=client)
    monkeypatch.setattr("stats_agent.cli.main.OrchestratorClient", factory)
    client.factory = factory
    return client


class TestSearch:

    def test_json_output(self, orchestrator):
        orchestrator.orchestrate.return_value = response(["YouTube use"], target=1)

        result = runner.invoke(
            app, ["search", "teen social media use", "-n", "1", "-m", "3", "-o", "json"]
        )

        assert result.exit_code == 0
        body = json.loads(result.stdout)
        assert body["verified_count"] == 1
        assert body["statistics"][0]["name"] == "YouTube use"

        request = orchestrator.orchestrate.await_args.args[0]
        assert request.min_verified == 1
        assert request.max_candidates == 3
        assert request.reputable_only is True

    def test_text_output(self, orchestrator):
        orchestrator.orchestrate.return_value = response(["YouTube use"], target=1)

        result = runner.invoke(app, ["search", "teen social media use", "-n", "1", "-o", "text"])

        assert result.exit_code == 0
        assert "Found: 1/1 verified statistics" in result.stdout
        assert "YouTube use" in result.stdout

    def test_default_options(self, orchestrator):
        orchestrator.orchestrate.return_value = response([f"s{i}" for i in range(10)], target=10)

        result = runner.invoke(app, ["search", "teen social media use"])

        assert result.exit_code == 0
        request = orchestrator.orchestrate.await_args.args[0]
        assert (request.min_verified, request.max_candidates) == (10, 30)
        assert "Verified Statistics (JSON)" in result.stdout

    def test_any_source_and_url(self, orchestrator):
        orchestrator.orchestrate.return_value = response(["YouTube use"], target=1)

        result = runner.invoke(app, [
            "search", "teen social media use", "-n", "1", "--any-source",
            "--orchestrator-url", "http://orchestrator:9000",
        ])

        assert result.exit_code == 0
        assert orchestrator.orchestrate.await_args.args[0].reputable_only is False
        assert orchestrator.factory.call_args.args[0] == "http://orchestrator:9000"

    def test_partial_result_continued(self, orchestrator):
        orchestrator.orchestrate.side_effect = [
            response(["YouTube use"], target=3),
            response(["TikTok use", "Instagram use"], target=2),
        ]

        result = runner.invoke(app, ["search", "teen social media use", "-n", "3", "-o", "json"])

        assert result.exit_code == 0
        body = json.loads(result.stdout)
        assert body["verified_count"] == 3
        assert body["partial"] is False
        assert orchestrator.orchestrate.await_count == 2

    def test_single_round(self, orchestrator):
        orchestrator.orchestrate.return_value = response([], target=3)

        result = runner.invoke(
            app, ["search", "teen social media use", "-n", "3", "--rounds", "1", "-o", "text"]
        )

        assert result.exit_code == 0
        assert orchestrator.orchestrate.await_count == 1
        assert "No verified statistics found." in result.stdout

    def test_service_failure_exits_1(self, orchestrator):
        orchestrator.orchestrate.side_effect = CollaboratorUnavailableError(
            CollaboratorError("research", "HTTP 503", status_code=503), attempts=3
        )

        result = runner.invoke(app, ["search", "teen social media use"])

        assert result.exit_code == 1

    def test_rejected_request_exits_2(self, orchestrator):
        orchestrator.orchestrate.side_effect = InvalidRequestError("orchestrator: HTTP 400")

        result = runner.invoke(app, ["search", "teen social media use"])

        assert result.exit_code == 2

    @pytest.mark.parametrize(
        "args",
        [
            ["search", "teen social media use", "-n", "0"],
            ["search", "teen social media use", "-m", "0"],
            ["search", "teen social media use", "-o", "xml"],
            ["search", "   "],
            ["search"],
        ],
    )
    def test_invalid_options_exit_2(self, orchestrator, args):
        result = runner.invoke(app, args)

        assert result.exit_code == 2
        orchestrator.orchestrate.assert_not_called()


class TestOtherCommands:

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert f"Version: {__version__}" in result.stdout

    def test_status(self):
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Orchestrator" in result.stdout
