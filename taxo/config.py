# =============================================================================
# taxo/config.py  —  Process Configuration
# =============================================================================
#
# WHERE SETTINGS COME FROM:
#   1. A .env file in the working directory (loaded with python-dotenv)
#   2. The real process environment (wins over .env, dotenv never overrides)
#
# Settings are read ONCE at startup and passed explicitly into the
# transports.  Request-handling code never reads os.environ itself.
#
# THE STDIO TOKEN:
#   The stdio transport serves exactly one Taxo account for its whole
#   lifetime.  Its token is resolved from an ordered list of sources:
#     a) --token <value> on the command line
#     b) the TAXO_MX_TOKEN environment variable
#   If neither is present the process refuses to start.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

from taxo.errors import ConfigError

DEFAULT_APP_BASE_URL = "https://app.taxo.co"
DEFAULT_DEMO_BASE_URL = "https://demo.taxo.co"
DEFAULT_PORT = 3000
DEFAULT_TIMEOUT_SECONDS = 30.0

TOKEN_ENV_VAR = "TAXO_MX_TOKEN"


@dataclass(frozen=True)
class Settings:
    """Everything the entry points need, resolved at startup."""

    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    base_url: str = f"http://localhost:{DEFAULT_PORT}"
    app_base_url: str = DEFAULT_APP_BASE_URL
    demo_base_url: str = DEFAULT_DEMO_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    token: str | None = None


def load_settings(environ: Mapping[str, str] | None = None, http: bool = True) -> Settings:
    """Build Settings from the environment (and .env, when reading os.environ).

    Args:
        environ: Mapping to read from.  Defaults to os.environ after loading
                 any .env file; tests pass a plain dict instead.
        http:    False for the stdio transport, which never listens on a
                 port.  PORT, HOST and BASE_URL are then left at their
                 defaults and not validated.

    Raises:
        ConfigError: If PORT or TAXO_TIMEOUT_SECONDS is not a valid number.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    listener = {}
    if http:
        port = _parse_number(environ, "PORT", int, DEFAULT_PORT)
        if not 0 < port < 65536:
            raise ConfigError(f"PORT must be between 1 and 65535, got {port}")
        listener = {
            "port": port,
            "host": environ.get("HOST") or "0.0.0.0",
            "base_url": environ.get("BASE_URL") or f"http://localhost:{port}",
        }

    timeout = _parse_number(environ, "TAXO_TIMEOUT_SECONDS", float, DEFAULT_TIMEOUT_SECONDS)
    if timeout <= 0:
        raise ConfigError(f"TAXO_TIMEOUT_SECONDS must be positive, got {timeout}")

    return Settings(
        **listener,
        app_base_url=environ.get("TAXO_APP_BASE_URL") or DEFAULT_APP_BASE_URL,
        demo_base_url=environ.get("TAXO_DEMO_BASE_URL") or DEFAULT_DEMO_BASE_URL,
        timeout_seconds=timeout,
        log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
        token=environ.get(TOKEN_ENV_VAR) or None,
    )


def resolve_stdio_token(cli_token: str | None, settings: Settings) -> str | None:
    """Return the stdio token: --token flag first, then TAXO_MX_TOKEN.

    An empty ``--token ""`` counts as absent, so the environment variable
    (already read into ``settings.token``) still gets a chance.
    """
    if cli_token:
        return cli_token
    return settings.token


def _parse_number(environ: Mapping[str, str], key: str, kind: type, default):
    raw = environ.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from None
