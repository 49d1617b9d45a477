"""Tests for application startup checks and validation."""

from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

import pytest

from threadkeep.startup import (
    DEFAULT_JWT_SECRET,
    StartupCheckError,
    StartupMetrics,
    check_database_connection,
    check_readiness,
    check_required_environment,
    run_all_startup_checks,
)


def _session_returning(value):
    mock_ctx = MagicMock()
    mock_ctx.__enter__ = MagicMock(return_value=mock_ctx)
    mock_ctx.__exit__ = MagicMock(return_value=False)
    result = MagicMock()
    result.scalar = MagicMock(return_value=value)
    mock_ctx.execute = MagicMock(return_value=result)
    return MagicMock(return_value=mock_ctx)


class TestDatabaseConnectionCheck:
    """Tests for database connection validation."""

    def test_check_database_connection_success(self):
        """Test successful database connection check."""
        with patch("threadkeep.startup.SessionLocal", _session_returning(1)):
            # Should not raise
            check_database_connection()

    def test_unexpected_result(self):
        with patch("threadkeep.startup.SessionLocal", _session_returning(0)):
            with pytest.raises(StartupCheckError) as exc_info:
                check_database_connection()

        assert "unexpected result" in str(exc_info.value)

    def test_connection_refused(self):
        """Test database connection check raises on connection failure."""
        with patch(
            "threadkeep.startup.SessionLocal",
            side_effect=Exception("Connection refused"),
        ):
            with pytest.raises(StartupCheckError) as exc_info:
                check_database_connection()

        assert "Cannot connect" in str(exc_info.value)
        assert "not running" in exc_info.value.hint


class TestEnvironmentCheck:
    """Tests for environment configuration validation."""

    def test_development_defaults_pass(self):
        with patch("threadkeep.startup.settings") as mock_settings:
            mock_settings.database_url = "postgresql://u:p@h/db"
            mock_settings.jwt_secret = DEFAULT_JWT_SECRET
            mock_settings.environment = "development"

            check_required_environment()

    def test_default_secret_rejected_in_production(self):
        """Test production refuses the development JWT secret."""
        with patch("threadkeep.startup.settings") as mock_settings:
            mock_settings.database_url = "postgresql://u:p@h/db"
            mock_settings.jwt_secret = DEFAULT_JWT_SECRET
            mock_settings.environment = "production"

            with pytest.raises(StartupCheckError) as exc_info:
                check_required_environment()

        assert "JWT_SECRET" in exc_info.value.message

    def test_missing_secret(self):
        with patch("threadkeep.startup.settings") as mock_settings:
            mock_settings.database_url = "postgresql://u:p@h/db"
            mock_settings.jwt_secret = ""
            mock_settings.environment = "development"

            with pytest.raises(StartupCheckError) as exc_info:
                check_required_environment()

        assert "JWT_SECRET" in exc_info.value.message


class TestRunAllStartupChecks:
    """Tests for the startup check orchestration."""

    def test_all_checks_pass(self):
        with (
            patch("threadkeep.startup.check_required_environment"),
            patch("threadkeep.startup.check_database_connection"),
            patch("threadkeep.startup.check_database_migrations"),
            patch(
                "threadkeep.startup.startup_metrics",
                StartupMetrics(started_at=datetime.now(UTC)),
            ) as metrics,
        ):
            run_all_startup_checks()

            assert metrics.checks_passed is True
            assert metrics.total_duration_ms is not None

    def test_failed_check_exits(self):
        with (
            patch("threadkeep.startup.check_required_environment"),
            patch(
                "threadkeep.startup.check_database_connection",
                side_effect=StartupCheckError("boom", "hint"),
            ),
            patch("threadkeep.startup.check_database_migrations") as migrations,
        ):
            with pytest.raises(SystemExit) as exc_info:
                run_all_startup_checks()

        assert exc_info.value.code == 1
        migrations.assert_not_called()


class TestReadiness:
    """Tests for check_readiness."""

    def test_not_ready_before_startup_checks(self):
        with (
            patch("threadkeep.startup.SessionLocal", _session_returning(1)),
            patch(
                "threadkeep.startup.startup_metrics",
                StartupMetrics(started_at=datetime.now(UTC)),
            ),
        ):
            ready, details = check_readiness()

        assert ready is False
        assert details["database"] == "healthy"
        assert details["startup_completed"] is False

    def test_ready_after_startup(self):
        metrics = StartupMetrics(started_at=datetime.now(UTC), checks_passed=True)
        with (
            patch("threadkeep.startup.SessionLocal", _session_returning(1)),
            patch("threadkeep.startup.startup_metrics", metrics),
        ):
            ready, details = check_readiness()

        assert ready is True
        assert details["ready"] is True
