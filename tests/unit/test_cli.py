"""Tests for the click CLI with the HTTP gateway replaced by FakeGateway."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from cloudprov.cli import cli
from cloudprov.errors import TransportError
from cloudprov.models.resources import Availability, ResourceKind
from tests.conftest import FakeGateway, from_archive, make_disk


@pytest.fixture
def fake() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def run(fake: FakeGateway, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CLOUDPROV_POLL_INTERVAL", "0.1")
    monkeypatch.setenv("CLOUDPROV_LOG_LEVEL", "error")
    runner = CliRunner()

    def _invoke(*args: str):
        # logging stays on the test configuration from conftest
        with (
            patch("cloudprov.cli.main.HttpResourceGateway", return_value=fake),
            patch("cloudprov.cli.main.setup_logging"),
        ):
            return runner.invoke(cli, list(args))

    return _invoke


class TestWaitCommand:
    def test_wait_until_available(self, fake: FakeGateway, run) -> None:
        fake.script(
            ResourceKind.DISK,
            42,
            [make_disk(42, availability=Availability.MIGRATING), make_disk(42)],
        )
        result = run("wait", "42", "--timeout", "10")
        assert result.exit_code == 0, result.output
        assert "42: available" in result.output

    def test_wait_streams_progress(self, fake: FakeGateway, run) -> None:
        fake.script(
            ResourceKind.DISK,
            42,
            [make_disk(42, availability=Availability.MIGRATING, migrated_mb=512), make_disk(42)],
        )
        result = run("wait", "42", "--watch", "--timeout", "10")
        assert result.exit_code == 0, result.output
        assert "42: available" in result.output
        assert all(line.startswith("42: ") for line in result.output.splitlines())

    def test_wait_fail_fast(self, fake: FakeGateway, run) -> None:
        fake.add(make_disk(42, availability=Availability.FAILED))
        result = run("wait", "42", "--fail-fast")
        assert result.exit_code == 1
        assert "Failed" in result.output

    def test_wait_transport_error(self, fake: FakeGateway, run) -> None:
        fake.script(ResourceKind.DISK, 42, [TransportError("HTTP 503: maintenance", status_code=503)])
        result = run("wait", "42")
        assert result.exit_code == 1
        assert "maintenance" in result.output

    def test_wait_rejects_bad_id(self, run) -> None:
        result = run("wait", "not-an-id")
        assert result.exit_code == 2


class TestCanEditCommand:
    def test_editable(self, fake: FakeGateway, run) -> None:
        fake.add(make_disk(7, tags={"os-unix"}, source_archive=from_archive(9)))
        result = run("can-edit", "7")
        assert result.exit_code == 0
        assert result.output.strip() == "editable"

    def test_not_editable(self, fake: FakeGateway, run) -> None:
        fake.add(make_disk(7))
        result = run("can-edit", "7")
        assert result.exit_code == 2
        assert result.output.strip() == "not editable"


class TestConnectFilterCommand:
    def test_connect_by_name(self, fake: FakeGateway, run) -> None:
        fake.add(make_disk(55, kind=ResourceKind.PACKET_FILTER, name="prod-filter"))
        result = run("connect-filter", "5001", "prod-filter")
        assert result.exit_code == 0, result.output
        assert fake.attachments == [(5001, 55)]

    def test_connect_unknown_name(self, fake: FakeGateway, run) -> None:
        result = run("connect-filter", "5001", "missing")
        assert result.exit_code == 1
        assert "Not Found" in result.output
        assert fake.attachments == []
