import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog

from scoresheet.logic.enums import GamePhase, RejectionKind
from scoresheet.logic.exceptions import RoundRejectedError
from scoresheet.logic.session import GameSession
from scoresheet.logic.types import BidOutOfRange, TrickSumMismatch
from scoresheet.tests.helpers import fill_round
from shared.logging import plain_values, session_context, setup_logging


@pytest.fixture(autouse=True)
def _cleanup_root_logger():
    """Close and remove all handlers from the root logger after each test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)


@pytest.fixture(autouse=True)
def _allow_file_logging():
    """Disable the _is_test guard so logging tests can create real file handlers."""
    with patch("shared.logging._is_test", return_value=False):
        yield


def _json_lines(log_path: Path) -> list[dict]:
    return [json.loads(line) for line in log_path.read_text().strip().splitlines()]


class TestSetupLogging:
    def test_configures_stdout_handler(self):
        setup_logging()
        root = logging.getLogger()

        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)

    def test_scoresheet_log_file_name(self, tmp_path):
        fixed_time = datetime(2025, 3, 15, 10, 30, 45, tzinfo=UTC)
        with patch("shared.logging.datetime") as mock_dt:
            mock_dt.now.return_value = fixed_time
            log_path = setup_logging(log_dir=tmp_path / "logs")

        assert log_path == tmp_path / "logs" / "scoresheet_2025-03-15_10-30-45.log"
        assert isinstance(logging.getLogger().handlers[1], logging.FileHandler)

    def test_returns_none_without_log_dir(self):
        assert setup_logging() is None

    def test_skips_file_handler_in_test_runs(self, tmp_path):
        with patch("shared.logging._is_test", return_value=True):
            log_path = setup_logging(log_dir=tmp_path / "logs")

        assert log_path is None
        assert not (tmp_path / "logs").exists()

    def test_clears_existing_handlers_on_repeated_calls(self):
        setup_logging()
        setup_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        setup_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_invalid_log_level_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "bogus")
        with pytest.raises(ValueError, match="Invalid LOG_LEVEL"):
            setup_logging()

    def test_invalid_log_format_raises(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "xml")
        with pytest.raises(ValueError, match="Invalid LOG_FORMAT"):
            setup_logging()

    def test_console_mode_writes_round_events(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "console")
        log_path = setup_logging(log_dir=tmp_path / "logs")

        session = GameSession("console-game")
        session.start(["Alice", "Bob", "Carol"])

        assert log_path is not None
        content = log_path.read_text()
        assert "session started" in content
        assert "console-game" in content


class TestJsonRoundEvents:
    def test_rejected_round_logs_reasons_as_json(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log_path = setup_logging(log_dir=tmp_path / "logs")
        session = GameSession("json-game")
        session.start(["Alice", "Bob", "Carol"])
        fill_round(session, 0, [2, 4, 4], [5, 4, 3])

        with pytest.raises(RoundRejectedError):
            session.advance()

        assert log_path is not None
        rejected = next(line for line in _json_lines(log_path) if line["event"] == "round rejected")
        assert rejected["session_id"] == "json-game"
        assert rejected["round_index"] == 0
        assert [reason["kind"] for reason in rejected["reasons"]] == ["bid_out_of_range", "trick_sum_mismatch"]
        assert rejected["reasons"][0]["min_bid"] == 3

    def test_session_context_appears_in_output(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        log_path = setup_logging(log_dir=tmp_path / "logs")

        with session_context("ctx-game", round_index=2):
            structlog.get_logger("test.context").info("saved round scores")
        structlog.get_logger("test.context").info("outside")

        assert log_path is not None
        inside, outside = _json_lines(log_path)
        assert inside["session_id"] == "ctx-game"
        assert inside["round_index"] == 2
        assert "session_id" not in outside


class TestSessionContext:
    def test_binds_session_id_only(self):
        with session_context("g1"):
            assert structlog.contextvars.get_contextvars() == {"session_id": "g1"}

        assert structlog.contextvars.get_contextvars() == {}

    def test_binds_round_index(self):
        with session_context("g1", round_index=0):
            assert structlog.contextvars.get_contextvars() == {"session_id": "g1", "round_index": 0}

    def test_nested_context_restores_outer_session(self):
        with session_context("outer"):
            with session_context("inner", round_index=1):
                assert structlog.contextvars.get_contextvars()["session_id"] == "inner"
            assert structlog.contextvars.get_contextvars() == {"session_id": "outer"}

    def test_context_released_on_error(self):
        with pytest.raises(RoundRejectedError), session_context("g1"):
            raise RoundRejectedError(round_index=0, reasons=[])

        assert structlog.contextvars.get_contextvars() == {}


class TestPlainValues:
    def test_rejection_kind_list(self):
        event_dict = {"kinds": [RejectionKind.BID_OUT_OF_RANGE, RejectionKind.TRICK_SUM_MISMATCH]}

        result = plain_values(None, "", event_dict)

        assert result["kinds"] == ["bid_out_of_range", "trick_sum_mismatch"]

    def test_phase_value(self):
        result = plain_values(None, "", {"phase": GamePhase.FINISHED, "rounds": 3})

        assert result == {"phase": "finished", "rounds": 3}

    def test_rejection_reasons_dumped(self):
        reasons = (
            BidOutOfRange(player_index=1, value=2, min_bid=3, max_bid=13),
            TrickSumMismatch(actual_sum=12, expected=13),
        )

        result = plain_values(None, "", {"reasons": reasons})

        assert result["reasons"] == [
            {"kind": "bid_out_of_range", "player_index": 1, "value": 2, "min_bid": 3, "max_bid": 13},
            {"kind": "trick_sum_mismatch", "actual_sum": 12, "expected": 13},
        ]

    def test_scores_by_player_unchanged(self):
        event_dict = {"scores": {"Alice": 50, "Bob": -40}, "event": "round closed"}

        result = plain_values(None, "", event_dict)

        assert result == {"scores": {"Alice": 50, "Bob": -40}, "event": "round closed"}
