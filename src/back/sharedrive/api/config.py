"""Configuration for sharedrive API."""
import os
from dataclasses import dataclass, field
from pathlib import Path


# Share links expire this long after creation; not configurable per link.
SHARE_DURATION_HOURS = 1


class ConfigValidationError(ValueError):
    """Raised when the process cannot start with the given configuration."""


def _default_cors_origins() -> list[str]:
    """Get default CORS origins, supporting env override."""
    env_origins = os.environ.get('CORS_ORIGINS', '')
    if env_origins:
        return [o.strip() for o in env_origins.split(',') if o.strip()]
    return ['*']


def _optional_env(name: str) -> str | None:
    value = os.environ.get(name, '').strip()
    return value or None


@dataclass
class APIConfig:
    """Central configuration for all API routers.

    This dataclass is passed to all create_*_router() factories,
    enabling dependency injection and avoiding global state.
    """
    storage_root: Path
    cors_origins: list[str] = field(default_factory=_default_cors_origins)

    # Base URL used when building share links, e.g. https://files.example.com.
    # When unset the URL is derived from the incoming request.
    public_base_url: str | None = field(default_factory=lambda: _optional_env('PUBLIC_BASE_URL'))

    # Directory holding the built browser UI (index.html + assets)
    static_dir: Path | None = field(
        default_factory=lambda: Path(os.environ['STATIC_DIR']) if _optional_env('STATIC_DIR') else None
    )

    share_duration_hours: int = SHARE_DURATION_HOURS

    host: str = field(default_factory=lambda: os.environ.get('HOST', '0.0.0.0'))
    # PORT is read and validated by load_config()
    port: int = 5000

    def __post_init__(self) -> None:
        self.storage_root = Path(self.storage_root).expanduser().resolve()

    def validate_startup(self) -> None:
        """Validate the storage root before accepting traffic.

        Creates the root (and its ancestors) when it does not exist yet.

        Raises:
            ConfigValidationError: If the root cannot be created, is not a
                directory, or is not readable and writable.
        """
        root = self.storage_root
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigValidationError(
                f"Could not create or access the storage directory.\n"
                f"  Path: {root}\n"
                f"  Error: {e.strerror or e}\n"
                f"\n"
                f"Check permissions and ensure STORAGE_PATH is valid."
            ) from e

        if not root.is_dir():
            raise ConfigValidationError(f'Storage root is not a directory: {root}')
        if not os.access(root, os.R_OK | os.W_OK | os.X_OK):
            raise ConfigValidationError(f'Storage root is not readable and writable: {root}')


def _port_from_env() -> int:
    raw = _optional_env('PORT')
    if raw is None:
        return 5000
    try:
        port = int(raw)
    except ValueError:
        port = -1
    if not 0 < port < 65536:
        raise ConfigValidationError(f"PORT must be an integer between 1 and 65535, got {raw!r}.")
    return port


def load_config() -> APIConfig:
    """Build APIConfig from environment variables.

    STORAGE_PATH is required; PORT, when set, must be a valid TCP port.
    Everything else has defaults.

    Raises:
        ConfigValidationError: If STORAGE_PATH is missing or PORT is invalid.
    """
    storage_path = _optional_env('STORAGE_PATH')
    if not storage_path:
        raise ConfigValidationError(
            "STORAGE_PATH is not defined.\n"
            "\n"
            "Set STORAGE_PATH to the absolute path of the directory to serve and retry."
        )
    return APIConfig(storage_root=Path(storage_path), port=_port_from_env())
