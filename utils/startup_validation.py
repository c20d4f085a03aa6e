"""
Startup Validation Module

Configuration checks run before any maintenance job touches the database:
1. Configuration validation - fail fast on missing critical settings
2. Structured startup logging so operators can see what was checked
"""

import os
import logging
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from datetime import datetime, timezone

from dotenv import load_dotenv

from services.maintenance_errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    name: str
    passed: bool
    message: str
    severity: str = "error"  # error, warning, info
    remediation: Optional[str] = None


@dataclass
class StartupReport:
    """Startup validation report."""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    environment: str = "unknown"
    validations: List[ValidationResult] = field(default_factory=list)

    def add_validation(self, result: ValidationResult):
        self.validations.append(result)

    def has_critical_failures(self) -> bool:
        return any(v.severity == "error" and not v.passed for v in self.validations)

    def failures(self) -> List[ValidationResult]:
        return [v for v in self.validations if not v.passed and v.severity == "error"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "environment": self.environment,
            "validations": [
                {
                    "name": v.name,
                    "passed": v.passed,
                    "message": v.message,
                    "severity": v.severity,
                    "remediation": v.remediation
                }
                for v in self.validations
            ],
            "summary": {
                "total_validations": len(self.validations),
                "passed": sum(1 for v in self.validations if v.passed),
                "failed": sum(1 for v in self.validations if not v.passed),
            }
        }


def normalize_database_url(url: str) -> str:
    """Rewrite the legacy postgres:// scheme that SQLAlchemy no longer accepts."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


class StartupValidator:
    """
    Validates:
    1. Required environment variables
    2. Database URL shape
    """

    REQUIRED_ENV_VARS = [
        ("DATABASE_URL", "Database connection string"),
    ]

    SUPPORTED_SCHEMES = ("postgresql", "postgres", "sqlite")

    def __init__(self):
        self.report = StartupReport()
        self.report.environment = os.getenv("FLASK_ENV", "development")

    def validate_required_env_vars(self) -> None:
        """Check all required environment variables are set."""
        for var_name, description in self.REQUIRED_ENV_VARS:
            if os.getenv(var_name):
                self.report.add_validation(ValidationResult(
                    name=f"env:{var_name}",
                    passed=True,
                    message=f"{var_name} is configured",
                ))
            else:
                self.report.add_validation(ValidationResult(
                    name=f"env:{var_name}",
                    passed=False,
                    message=f"Missing required: {var_name}",
                    remediation=f"Set {var_name} environment variable. {description}"
                ))

    def validate_database_url(self) -> None:
        """Check the database URL uses a supported scheme."""
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            return

        scheme = database_url.split(":", 1)[0].split("+", 1)[0]
        if scheme in self.SUPPORTED_SCHEMES:
            self.report.add_validation(ValidationResult(
                name="db:url",
                passed=True,
                message=f"Database scheme '{scheme}' is supported",
            ))
        else:
            self.report.add_validation(ValidationResult(
                name="db:url",
                passed=False,
                message=f"Unsupported database scheme '{scheme}'",
                remediation="Use a postgresql:// (or sqlite:// for local runs) DATABASE_URL"
            ))

    def run_all_validations(self) -> StartupReport:
        """Run all validation checks and return the report."""
        logger.debug(f"Startup validation, environment: {self.report.environment}")

        self.validate_required_env_vars()
        self.validate_database_url()

        for v in self.report.failures():
            logger.error(f"  - {v.name}: {v.message}")
            if v.remediation:
                logger.error(f"    Fix: {v.remediation}")

        return self.report

    def fail_if_not_ready(self) -> None:
        """Raise ConfigurationError when any critical validation failed."""
        if self.report.has_critical_failures():
            failures = self.report.failures()
            raise ConfigurationError(
                "; ".join(v.message for v in failures),
                context={"failed": [v.name for v in failures]}
            )


def require_database_url() -> str:
    """
    Load .env, validate configuration and return the normalized DATABASE_URL.

    Raises:
        ConfigurationError: DATABASE_URL is missing or unusable
    """
    load_dotenv()
    validator = StartupValidator()
    validator.run_all_validations()
    validator.fail_if_not_ready()
    return normalize_database_url(os.environ["DATABASE_URL"])
