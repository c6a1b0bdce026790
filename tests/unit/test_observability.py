"""
Unit tests for structured logging and Prometheus metrics.
"""

import io
import json
import logging

import pytest

from fieldrules.core.errors import UnknownRuleError
from fieldrules.core.rules import Validator
from fieldrules.observability import metrics
from fieldrules.observability.logger import get_logger, log_operation, setup_logger
from fieldrules.observability.metrics import REGISTRY


def sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestLogger:
    """Tests for logger setup"""

    def test_json_records(self):
        stream = io.StringIO()
        logger = setup_logger("fieldrules_test.json", level="INFO", stream=stream)

        logger.info("pass complete", extra={"rule_set": "signup"})

        record = json.loads(stream.getvalue())
        assert record["message"] == "pass complete"
        assert record["level"] == "INFO"
        assert record["logger"] == "fieldrules_test.json"
        assert record["rule_set"] == "signup"

    def test_text_records(self):
        stream = io.StringIO()
        logger = setup_logger("fieldrules_test.text", level="DEBUG", format_type="text", stream=stream)

        logger.debug("plain")

        assert " - DEBUG - " in stream.getvalue()

    def test_level_filters(self):
        stream = io.StringIO()
        logger = setup_logger("fieldrules_test.level", level="WARNING", stream=stream)

        logger.info("hidden")

        assert stream.getvalue() == ""

    def test_setup_replaces_handlers(self):
        logger = setup_logger("fieldrules_test.handlers", stream=io.StringIO())
        setup_logger("fieldrules_test.handlers", stream=io.StringIO())

        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_package_children_share_root(self):
        logger = get_logger("fieldrules.core.something")

        assert logger.handlers == []
        assert logging.getLogger("fieldrules").handlers


class TestLogOperation:
    """Tests for log_operation"""

    def test_success(self):
        stream = io.StringIO()
        logger = setup_logger("fieldrules_test.operation", level="INFO", stream=stream)

        with log_operation("Validating", logger=logger, rule_set="signup") as op:
            pass

        record = json.loads(stream.getvalue())
        assert op.duration is not None
        assert record["status"] == "success"
        assert record["operation"] == "Validating"
        assert record["rule_set"] == "signup"

    def test_failure_is_logged_and_raised(self):
        stream = io.StringIO()
        logger = setup_logger("fieldrules_test.operation_error", level="INFO", stream=stream)

        with pytest.raises(RuntimeError):
            with log_operation("Validating", logger=logger):
                raise RuntimeError("boom")

        record = json.loads(stream.getvalue())
        assert record["status"] == "error"
        assert record["error_type"] == "RuntimeError"
        assert record["error_message"] == "boom"


class TestMetrics:
    """Tests for Prometheus metrics"""

    def test_validation_pass_recorded(self):
        before_passed = sample("fieldrules_validation_passes_total", rule_set="metrics_pass", outcome="passed")
        before_failed = sample("fieldrules_validation_passes_total", rule_set="metrics_pass", outcome="failed")
        before_rule = sample("fieldrules_rule_failures_total", rule_set="metrics_pass", rule="digits")

        Validator({"mobile": "13800138000"}, {"mobile": "digits:11"}, name="metrics_pass").validate()
        Validator({"mobile": "1"}, {"mobile": "digits:11"}, {"digits": "bad"}, name="metrics_pass").validate()

        assert sample("fieldrules_validation_passes_total", rule_set="metrics_pass", outcome="passed") == before_passed + 1
        assert sample("fieldrules_validation_passes_total", rule_set="metrics_pass", outcome="failed") == before_failed + 1
        assert sample("fieldrules_rule_failures_total", rule_set="metrics_pass", rule="digits") == before_rule + 1

    def test_skipped_rules_counted(self):
        before = sample("fieldrules_rule_evaluations_total", rule="digits", state="skipped")

        Validator({}, {"mobile": "digits:11"}).validate()

        assert sample("fieldrules_rule_evaluations_total", rule="digits", state="skipped") == before + 1

    def test_configuration_error_recorded(self):
        before = sample("fieldrules_configuration_errors_total", error_type="UnknownRuleError")

        with pytest.raises(UnknownRuleError):
            Validator({}, {"a": "shiny"}, name="metrics_error")

        assert sample("fieldrules_configuration_errors_total", error_type="UnknownRuleError") == before + 1
        assert sample("fieldrules_validation_passes_total", rule_set="metrics_error", outcome="error") >= 1

    def test_presence_query_recorded(self):
        metrics.record_presence_query("metrics_table", False)

        assert sample("fieldrules_presence_queries_total", table="metrics_table", status="error") >= 1

    def test_track_duration(self):
        before = sample("fieldrules_presence_query_duration_seconds_count", table="tracked")

        with metrics.track_duration(metrics.presence_query_duration_seconds, table="tracked"):
            pass

        assert sample("fieldrules_presence_query_duration_seconds_count", table="tracked") == before + 1

    def test_generate_metrics(self):
        metrics.set_gauge(metrics.db_connection_pool_size, 3, pool_name="metrics_pool")

        output = metrics.generate_metrics()

        assert b'fieldrules_db_connection_pool_size{pool_name="metrics_pool"} 3.0' in output

    def test_start_metrics_server(self, monkeypatch):
        calls = []
        monkeypatch.setattr("prometheus_client.start_http_server",
                            lambda port, registry: calls.append((port, registry)))
        monkeypatch.setenv("METRICS_PORT", "9105")

        metrics.start_metrics_server()

        assert calls == [(9105, REGISTRY)]
