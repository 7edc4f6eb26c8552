"""Tests for structured logging."""

from __future__ import annotations

import json
import logging
from unittest.mock import Mock

from cockroachdb_operator.logging import log_resource_event, sanitize_secrets


class TestLogResourceEvent:
    """Test cases for log_resource_event function."""

    def test_emits_json(self):
        """Test that the record is a JSON document with resource fields."""
        logger = Mock()

        log_resource_event(
            logger,
            controller="cockroachdb-operator",
            resource_kind="Cluster",
            resource_name="prod1",
            uid="uid-1",
            event="create",
            reason="Created",
            message="Created cluster",
            external_name="abc",
        )

        level, payload = logger.log.call_args[0]
        data = json.loads(payload)
        assert level == logging.INFO
        assert data["resource"] == "Cluster"
        assert data["name"] == "prod1"
        assert data["external_name"] == "abc"

    def test_redacts_secret_fields(self):
        """Test that secret fields never reach the log."""
        logger = Mock()

        log_resource_event(
            logger,
            controller="cockroachdb-operator",
            resource_kind="Cluster",
            resource_name="prod1",
            uid="uid-1",
            event="publish",
            reason="Published",
            message="done",
            level=logging.WARNING,
            dsn="postgresql://alice:pw@h:26257/defaultdb",
        )

        level, payload = logger.log.call_args[0]
        assert level == logging.WARNING
        assert "pw@h" not in payload
        assert json.loads(payload)["dsn"] == "***REDACTED***"


class TestSanitizeSecrets:
    """Test cases for sanitize_secrets function."""

    def test_leaves_other_fields(self):
        """Test that ordinary fields are kept and input is not mutated."""
        data = {"password": "x", "region": "us-central1"}

        result = sanitize_secrets(data)

        assert result == {"password": "***REDACTED***", "region": "us-central1"}
        assert data["password"] == "x"
