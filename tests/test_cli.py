# SPDX-License-Identifier: MIT

import pytest
from typer.testing import CliRunner

from clocklet.repository.configuration import CONFIGURATION_REPO
from clocklet.terminal.app import app

from .conftest import utc


@pytest.fixture
def invoke(engine):
    runner = CliRunner()

    def invoke(*args: str):
        return runner.invoke(app, list(args), obj=engine)

    return invoke


def test_clock_in_and_out(invoke, engine, clock):
    result = invoke("in")
    assert result.exit_code == 0, result.output
    assert engine.is_tracking

    clock.advance(hours=1, minutes=30)
    result = invoke("o")

    assert result.exit_code == 0, result.output
    assert "clocked out after 1h 30m" in result.output
    assert not engine.is_tracking
    assert len(engine.entries) == 1


def test_clock_in_twice_fails(invoke):
    invoke("in")
    result = invoke("in")

    assert result.exit_code == 1
    assert "already clocked in since 2026/01/18 09:00" in result.output


def test_clock_out_when_idle_fails(invoke):
    result = invoke("out")
    assert result.exit_code == 1
    assert "not clocked in" in result.output


def test_toggle(invoke, engine, clock):
    invoke("toggle")
    assert engine.is_tracking
    clock.advance(minutes=5)
    invoke("t")
    assert not engine.is_tracking


def test_status(invoke, engine):
    engine.add_entry(utc(2026, 1, 18, 6), utc(2026, 1, 18, 8))

    result = invoke("status")

    assert result.exit_code == 0, result.output
    assert "idle" in result.output
    assert "2h 0m" in result.output


def test_add_modify_delete(invoke, engine):
    result = invoke("add", "--in", "2026-01-17 09:00", "--out", "2026-01-17 12:15")
    assert result.exit_code == 0, result.output
    [entry] = engine.entries
    assert entry["clock_in"] == utc(2026, 1, 17, 9)
    assert "3h 15m" in result.output

    result = invoke("modify", entry["id"][:8], "--out", "2026-01-17 13:00")
    assert result.exit_code == 0, result.output
    assert engine.get_entry(entry["id"])["clock_out"] == utc(2026, 1, 17, 13)

    result = invoke("history")
    assert result.exit_code == 0, result.output
    assert entry["id"][:8] in result.output

    result = invoke("delete", entry["id"][:8])
    assert result.exit_code == 0, result.output
    assert "deleted 1 entry" in result.output
    assert engine.entries == []


def test_add_rejects_clock_out_before_clock_in(invoke, engine):
    result = invoke("a", "-i", "2026-01-17 12:00", "-o", "2026-01-17 09:00")

    assert result.exit_code == 1
    assert "Clock Out must be after Clock In" in result.output
    assert engine.entries == []


def test_add_rejects_unparseable_time(invoke):
    result = invoke("add", "--in", "tomorrowish", "--out", "now")
    assert result.exit_code == 2


def test_modify_unknown_entry(invoke):
    result = invoke("modify", "zzzz", "--out", "now")
    assert result.exit_code == 1
    assert "No entry matches 'zzzz'" in result.output


def test_recover_complete(invoke, engine):
    invoke("in")

    result = invoke("recover", "complete", "--out", "2026-01-18 17:00")

    assert result.exit_code == 0, result.output
    assert not engine.is_tracking
    assert engine.entries[0]["clock_out"] == utc(2026, 1, 18, 17)


def test_recover_discard(invoke, engine):
    invoke("in")

    result = invoke("r", "d")
    assert result.exit_code == 0, result.output
    assert "open session discarded" in result.output
    assert engine.entries == []

    result = invoke("recover", "discard")
    assert "no open session" in result.output


def test_sleep(invoke, config, clock):
    result = invoke("sleep")
    assert "nothing to do" in result.output

    invoke("in")
    clock.advance(hours=2)
    result = invoke("sleep")
    assert "clocked out for sleep after 2h 0m" in result.output


def test_stats_without_entries(invoke):
    result = invoke("stats")
    assert result.exit_code == 0, result.output
    assert "no data for this period" in result.output


def test_stats_all_months(invoke, engine):
    engine.add_entry(utc(2025, 6, 3, 9), utc(2025, 6, 3, 12))

    result = invoke("stats", "--all")

    assert result.exit_code == 0, result.output
    assert "June 2025" in result.output
    assert "peak month" in result.output


def test_config_set_and_show(invoke):
    result = invoke("config", "set", "--reminder-after", "45", "--no-stop-on-sleep")

    assert result.exit_code == 0, result.output
    CONFIGURATION_REPO.reload()
    config = CONFIGURATION_REPO.get_config()
    assert config["reminder_threshold_minutes"] == 45
    assert config["stop_on_sleep"] is False


def test_config_set_rejects_invalid_value(invoke):
    result = invoke("c", "s", "--reminder-after", "0")

    assert result.exit_code == 1
    assert "reminder_threshold_minutes must be greater than 0" in result.output


def test_no_header_hides_title(invoke):
    invoke("in")
    result = invoke("--no-header", "status")

    assert result.exit_code == 0, result.output
    assert "tracking" in result.output
    assert "clocklet" not in result.output


def test_config_show_reports_configured_data_path(invoke):
    result = invoke("config", "set", "--data-path", "~/clocklet-data")

    assert result.exit_code == 0, result.output
    assert "~/clocklet-data" in result.output
    assert "(default)" not in result.output
