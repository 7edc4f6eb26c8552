"""Tests for Kubernetes event utilities."""

from __future__ import annotations

from unittest.mock import patch

from cockroachdb_operator.utils.events import (
    emit_cannot_connect,
    emit_cluster_created,
    emit_cluster_deleted,
    emit_cluster_updated,
    emit_connection_published,
    emit_event,
    emit_reconcile_failed,
)

BODY = {"apiVersion": "cockroachdb.crossplane.io/v1alpha1", "kind": "Cluster", "metadata": {"name": "prod1"}}


class TestEmitEvent:
    """Test cases for emit_event function."""

    @patch("cockroachdb_operator.utils.events.kopf.event")
    def test_emit_event_normal(self, mock_event):
        """Test emitting normal event."""
        emit_event(BODY, "TestReason", "Test message")

        mock_event.assert_called_once_with(
            BODY,
            reason="TestReason",
            message="Test message",
            type="Normal",
        )

    @patch("cockroachdb_operator.utils.events.kopf.event")
    def test_emit_event_warning(self, mock_event):
        """Test emitting warning event."""
        emit_event(BODY, "ErrorReason", "Error occurred", type_="Warning")

        mock_event.assert_called_once_with(
            BODY,
            reason="ErrorReason",
            message="Error occurred",
            type="Warning",
        )


class TestReconcileEvents:
    """Test cases for reconciliation events."""

    @patch("cockroachdb_operator.utils.events.kopf.event")
    def test_emit_reconcile_failed(self, mock_event):
        """Test emitting reconcile failed event."""
        emit_reconcile_failed(BODY, "boom")

        assert mock_event.call_args[1]["reason"] == "ReconcileFailed"
        assert mock_event.call_args[1]["message"] == "boom"
        assert mock_event.call_args[1]["type"] == "Warning"

    @patch("cockroachdb_operator.utils.events.kopf.event")
    def test_emit_cannot_connect(self, mock_event):
        """Test emitting connect failure event."""
        emit_cannot_connect(BODY, "cannot get credentials: nope")

        assert mock_event.call_args[1]["reason"] == "CannotConnectToProvider"
        assert mock_event.call_args[1]["type"] == "Warning"


class TestClusterEvents:
    """Test cases for cluster lifecycle events."""

    @patch("cockroachdb_operator.utils.events.kopf.event")
    def test_lifecycle_events_name_the_cluster(self, mock_event):
        """Test create, update and delete events."""
        emit_cluster_created(BODY, "abc")
        assert mock_event.call_args[1]["reason"] == "CreatedExternalResource"
        assert "abc" in mock_event.call_args[1]["message"]

        emit_cluster_updated(BODY, "abc")
        assert mock_event.call_args[1]["reason"] == "UpdatedExternalResource"

        emit_cluster_deleted(BODY, "abc")
        assert mock_event.call_args[1]["reason"] == "DeletedExternalResource"

    @patch("cockroachdb_operator.utils.events.kopf.event")
    def test_emit_connection_published(self, mock_event):
        """Test connection details event names the secret."""
        emit_connection_published(BODY, "prod1-conn")

        assert mock_event.call_args[1]["reason"] == "PublishedConnectionDetails"
        assert "prod1-conn" in mock_event.call_args[1]["message"]
