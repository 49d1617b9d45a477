"""
Startup dependency checks for the ThreadKeep backend.

Validates critical dependencies before the application starts serving requests.
Fails fast with clear, actionable error messages when requirements aren't met.
"""

import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from alembic.config import Config as AlembicConfig
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import text

from threadkeep.config import settings
from threadkeep.db.connection import SessionLocal, engine

DEFAULT_JWT_SECRET = "default-secret-change-me"
MIGRATIONS_DIR = Path(__file__).parent / "db" / "migrations"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StartupMetrics:
    """Metrics collected during startup checks."""

    started_at: datetime
    completed_at: Optional[datetime] = None
    total_duration_ms: Optional[float] = None
    environment_check_ms: Optional[float] = None
    database_check_ms: Optional[float] = None
    migrations_check_ms: Optional[float] = None
    checks_passed: bool = False
    last_check_time: Optional[datetime] = None


# Global startup metrics (populated during startup)
startup_metrics = StartupMetrics(started_at=_utc_now())


class StartupCheckError(Exception):
    """Raised when a critical startup check fails."""

    def __init__(self, message: str, hint: Optional[str] = None):
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        error_msg = f"\n{'='*70}\nSTARTUP CHECK FAILED\n{'='*70}\n\n{self.message}\n"
        if self.hint:
            error_msg += f"\nHint: {self.hint}\n"
        error_msg += f"{'='*70}\n"
        return error_msg


def check_required_environment() -> None:
    """
    Validate required environment variables are set.

    Raises:
        StartupCheckError: If critical settings are missing or unsafe
    """
    missing = []

    if not settings.database_url:
        missing.append("DATABASE_URL or POSTGRES_*")
    if not settings.jwt_secret:
        missing.append("JWT_SECRET")

    if missing:
        raise StartupCheckError(
            "Missing required environment variables:\n"
            + "\n".join(f"  - {var}" for var in missing),
            "Set these variables in your .env file",
        )

    if settings.environment == "production" and settings.jwt_secret == DEFAULT_JWT_SECRET:
        raise StartupCheckError(
            "JWT_SECRET is still the development default",
            "Set a random JWT_SECRET before running in production",
        )


def check_database_connection() -> None:
    """
    Verify the database is accessible and responsive.

    Raises:
        StartupCheckError: If database connection fails
    """
    try:
        with SessionLocal() as session:
            result = session.execute(text("SELECT 1")).scalar()
            if result != 1:
                raise StartupCheckError(
                    "Database query returned unexpected result",
                    "Database may be corrupted or misconfigured",
                )
    except StartupCheckError:
        raise
    except Exception as e:
        error_str = str(e).lower()

        if "could not connect" in error_str or "connection refused" in error_str:
            hint = "PostgreSQL is not running or not reachable"
        elif "authentication failed" in error_str or "password" in error_str:
            hint = (
                "Database authentication failed.\n"
                "  - Check credentials in .env file\n"
                f"  - Current user: {settings.postgres_user}"
            )
        elif "database" in error_str and "does not exist" in error_str:
            hint = (
                f"Database '{settings.postgres_db}' does not exist.\n"
                f"  - Create it: createdb {settings.postgres_db}\n"
                "  - Then run migrations: alembic upgrade head"
            )
        else:
            hint = f"Check your database configuration in .env\nError: {str(e)}"

        raise StartupCheckError(
            f"Cannot connect to database\n"
            f"Host: {settings.postgres_host}:{settings.postgres_port}\n"
            f"Database: {settings.postgres_db}",
            hint,
        ) from e


def check_database_migrations() -> None:
    """
    Verify Alembic database migrations are current.

    Raises:
        StartupCheckError: If pending migrations exist
    """
    try:
        alembic_cfg = AlembicConfig()
        alembic_cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
        script = ScriptDirectory.from_config(alembic_cfg)

        head_revision = script.get_current_head()

        with engine.connect() as connection:
            context = MigrationContext.configure(connection)
            current_revision = context.get_current_revision()

        if current_revision is None:
            raise StartupCheckError(
                "Database has no migration version\nDatabase appears uninitialized",
                "Run migrations: alembic upgrade head",
            )

        if current_revision != head_revision:
            raise StartupCheckError(
                f"Database migrations are out of date\n"
                f"Current revision: {current_revision}\n"
                f"Expected revision: {head_revision}",
                "Run: alembic upgrade head",
            )

    except StartupCheckError:
        raise
    except Exception as e:
        raise StartupCheckError(
            f"Failed to check migration status: {str(e)}",
            "Verify Alembic is properly configured",
        ) from e


def run_all_startup_checks() -> None:
    """
    Execute all startup dependency checks.

    Runs checks in order of dependency:
    1. Environment variables
    2. Database connection
    3. Database migrations

    Raises:
        SystemExit: If any check fails
    """
    global startup_metrics
    startup_start = time.time()

    checks = [
        ("Environment Variables", check_required_environment, "environment_check_ms"),
        ("Database Connection", check_database_connection, "database_check_ms"),
        ("Database Migrations", check_database_migrations, "migrations_check_ms"),
    ]

    print("\n" + "=" * 70)
    print("Starting ThreadKeep Backend - Running Startup Checks")
    print("=" * 70 + "\n")

    for check_name, check_func, metric_name in checks:
        print(f"  Checking {check_name}...", end=" ", flush=True)
        check_start = time.time()
        try:
            check_func()
        except StartupCheckError as e:
            setattr(startup_metrics, metric_name, (time.time() - check_start) * 1000)
            print("FAIL")
            print(str(e))
            sys.exit(1)
        check_duration = (time.time() - check_start) * 1000
        setattr(startup_metrics, metric_name, check_duration)
        print(f"PASS ({check_duration:.1f}ms)")

    startup_metrics.completed_at = _utc_now()
    startup_metrics.total_duration_ms = (time.time() - startup_start) * 1000
    startup_metrics.checks_passed = True
    startup_metrics.last_check_time = _utc_now()

    print("\n" + "=" * 70)
    print(
        f"All startup checks passed - Server is ready ({startup_metrics.total_duration_ms:.1f}ms)"
    )
    print("=" * 70 + "\n")


def check_readiness() -> tuple[bool, dict]:
    """
    Quick readiness check for load balancer probes.

    Returns:
        tuple: (is_ready, details) where details contains ready, database,
            startup_completed and uptime_seconds
    """
    db_ready = False
    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
            db_ready = True
    except Exception:
        db_ready = False

    ready = startup_metrics.checks_passed and db_ready
    details = {
        "ready": ready,
        "database": "healthy" if db_ready else "unhealthy",
        "startup_completed": startup_metrics.checks_passed,
        "uptime_seconds": (_utc_now() - startup_metrics.started_at).total_seconds(),
    }
    return ready, details
