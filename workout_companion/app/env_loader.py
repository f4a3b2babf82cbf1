"""Load environment variables early for the FastAPI app.

For local dev, loads a .env file based on ENV ("dev"). In deployed environments
(ENV="staging" or "prod") env vars are injected by the platform, so no .env file
is loaded. Tests run with ENV="test" and set their own variables.

The health-data settings are checked here too, so a bad deployment fails before
the first summary refresh rather than in the middle of one.
"""

import os
import sys
from typing import Literal
from urllib.parse import urlparse

from dotenv import load_dotenv

EnvironmentName = Literal["dev", "test", "staging", "prod"]
ENVIRONMENT_NAMES: tuple[EnvironmentName, ...] = ("dev", "test", "staging", "prod")

# Required environment variables that must be set for the app to run.
REQUIRED_ENV_VARS = [
    "HEALTH_DATA_API_URL",
]


def _fail(problems: list[str]) -> None:
    for problem in problems:
        print(f"ERROR: {problem}", file=sys.stderr)
    print(
        "Please set these variables in your .env file or environment.",
        file=sys.stderr,
    )
    sys.exit(1)


def validate_required_env_vars() -> None:
    """Validate that all required environment variables are set.

    Raises:
        SystemExit: If any required environment variables are missing.
    """
    missing = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]
    if missing:
        _fail([f"Missing required environment variables: {', '.join(missing)}"])


def validate_health_data_settings() -> None:
    """Validate the format of the health-data service settings.

    Raises:
        SystemExit: If the service URL isn't an http(s) URL or the timeout isn't a
            positive number.
    """
    problems = []
    url = urlparse(os.getenv("HEALTH_DATA_API_URL", ""))
    if url.scheme not in ("http", "https") or not url.netloc:
        problems.append(
            f"HEALTH_DATA_API_URL must be an http(s) URL, got "
            f"{os.getenv('HEALTH_DATA_API_URL')!r}"
        )
    raw_timeout = os.getenv("HEALTH_DATA_TIMEOUT_SECONDS")
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            timeout = 0.0
        if timeout <= 0:
            problems.append(
                f"HEALTH_DATA_TIMEOUT_SECONDS must be a positive number, got {raw_timeout!r}"
            )
    if problems:
        _fail(problems)


def _invalid_environment(env: str) -> ValueError:
    return ValueError(
        f"Invalid ENV value: {env}. Must be one of {', '.join(ENVIRONMENT_NAMES)}."
    )


# Load env vars before any app code runs.
env = os.getenv("ENV", "dev")
if env in ("staging", "prod"):
    print(f"Running in {env} environment (env vars injected by the platform)")
elif env == "dev":
    print("Loading environment variables from .env.dev")
    load_dotenv(".env.dev", verbose=True)
elif env != "test":
    raise _invalid_environment(env)

# Validate after loading.
validate_required_env_vars()
validate_health_data_settings()


def get_current_environment() -> EnvironmentName:
    """Get the current environment (dev, test, staging, or prod)."""
    env = os.getenv("ENV", "dev")
    if env in ENVIRONMENT_NAMES:
        return env  # type: ignore[return-value]
    raise _invalid_environment(env)
