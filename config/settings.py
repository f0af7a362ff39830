"""Application configuration settings.

This module centralizes all configuration values loaded from:
1. config.base.yaml (shared defaults)
2. config.{env}.yaml (environment-specific: dev, staging, prod)
3. config.local.yaml (local overrides, git-ignored)
4. Environment variables
5. Explicit overrides passed to Config (highest priority, used by tests)

Default environment is 'development' (DEV).

Usage:
    from config.settings import config

    # Access config values
    secret = config.JWT_SECRET
    debug = config.DEBUG

    # Build an isolated config (tests, scripts)
    cfg = Config(overrides={'database': {'name': 'tijara_test'}})
"""
import os
from pathlib import Path
from typing import Optional, Any, Dict
import yaml


# Environment name mappings
ENV_ALIASES = {
    'dev': 'development',
    'development': 'development',
    'staging': 'staging',
    'stage': 'staging',
    'prod': 'production',
    'production': 'production',
    'test': 'test',
    'testing': 'test',
}

# Default environment
DEFAULT_ENV = 'development'

TRUE_VALUES = ('1', 'true', 'yes', 'on')


class Config:
    """Centralized application configuration.

    Loads configuration from YAML files based on environment.

    Priority (highest to lowest):
    1. Explicit overrides (nested dict, same shape as the YAML files)
    2. Environment variables
    3. config.local.yaml (for local development overrides)
    4. config.{env}.yaml (environment-specific: dev, staging, prod)
    5. config.base.yaml (shared defaults)

    Environment is determined by:
    1. FLASK_ENV environment variable
    2. APP_ENV environment variable
    3. Default: 'development'
    """

    def __init__(self, overrides: Optional[Dict[str, Any]] = None, config_dir: Optional[Path] = None):
        self._config_dir = Path(config_dir) if config_dir else Path(__file__).parent
        self._overrides = overrides or {}
        self._config_data: Dict[str, Any] = {}
        self._current_env = DEFAULT_ENV
        self._load_config()

    @staticmethod
    def _get_environment() -> str:
        """Determine current environment from env vars or default to dev."""
        env = os.getenv('FLASK_ENV') or os.getenv('APP_ENV') or DEFAULT_ENV
        env = env.lower().strip()
        return ENV_ALIASES.get(env, DEFAULT_ENV)

    def _load_config(self):
        """Load configuration from YAML files based on environment."""
        self._current_env = self._get_environment()
        self._config_data = self._read_yaml('config.base.yaml')

        env_config_map = {
            'development': 'config.dev.yaml',
            'staging': 'config.staging.yaml',
            'production': 'config.prod.yaml',
            'test': 'config.test.yaml',
        }
        env_config_file = env_config_map.get(self._current_env, 'config.dev.yaml')
        self._config_data = self._deep_merge(self._config_data, self._read_yaml(env_config_file))

        # Local overrides (not in git)
        self._config_data = self._deep_merge(self._config_data, self._read_yaml('config.local.yaml'))

    def _read_yaml(self, filename: str) -> Dict[str, Any]:
        path = self._config_dir / filename
        if not path.exists():
            return {}
        with open(path, 'r') as f:
            return yaml.safe_load(f) or {}

    def _deep_merge(self, base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @staticmethod
    def _dig(data: Dict[str, Any], keys) -> Any:
        value = data
        for key in keys:
            if not isinstance(value, dict):
                return None
            value = value.get(key)
            if value is None:
                return None
        return value

    def _get_yaml_value(self, *keys, default=None) -> Any:
        """Get a nested value from YAML config."""
        value = self._dig(self._config_data, keys)
        return default if value is None else value

    def _get_value(self, env_name: Optional[str], *keys, default=None) -> Any:
        """Resolve a setting: override, then env var, then YAML, then default."""
        override = self._dig(self._overrides, keys)
        if override is not None:
            return override
        if env_name:
            env_val = os.getenv(env_name)
            if env_val:
                return env_val
        return self._get_yaml_value(*keys, default=default)

    def _get_bool(self, env_name: Optional[str], *keys, default: bool = False) -> bool:
        value = self._get_value(env_name, *keys, default=default)
        if isinstance(value, str):
            return value.lower() in TRUE_VALUES
        return bool(value)

    def _get_int(self, env_name: Optional[str], *keys, default: int = 0) -> int:
        return int(self._get_value(env_name, *keys, default=default))

    def reload(self) -> 'Config':
        """Reload configuration (useful for testing)."""
        self._load_config()
        return self

    # ==========================================================================
    # Environment Info
    # ==========================================================================

    @property
    def ENV(self) -> str:
        """Application environment (development, staging, production, test)."""
        return self._current_env

    @property
    def IS_DEV(self) -> bool:
        return self._current_env == 'development'

    @property
    def IS_PROD(self) -> bool:
        return self._current_env == 'production'

    @property
    def IS_TEST(self) -> bool:
        return self._current_env == 'test'

    # ==========================================================================
    # Application Settings
    # ==========================================================================

    @property
    def DEBUG(self) -> bool:
        """Flask debug mode."""
        return self._get_bool('FLASK_DEBUG', 'app', 'debug', default=False)

    @property
    def PORT(self) -> int:
        """Server port."""
        return self._get_int('PORT', 'app', 'port', default=5000)

    @property
    def APP_NAME(self) -> str:
        return self._get_value('APP_NAME', 'app', 'name', default='Tijara API')

    @property
    def APP_VERSION(self) -> str:
        return str(self._get_value(None, 'app', 'version', default='1.0.0'))

    # ==========================================================================
    # Security Settings
    # ==========================================================================

    @property
    def JWT_SECRET(self) -> Optional[str]:
        """JWT secret key for token signing. Required in production."""
        return self._get_value('JWT_SECRET', 'security', 'jwt', 'secret')

    @property
    def JWT_ALGORITHM(self) -> str:
        """JWT algorithm (default: HS256)."""
        return self._get_value('JWT_ALGORITHM', 'security', 'jwt', 'algorithm', default='HS256')

    @property
    def ACCESS_TOKEN_EXPIRE_MINUTES(self) -> int:
        """Access token expiry in minutes (default: 7 days)."""
        return self._get_int('ACCESS_TOKEN_MINUTES', 'security', 'jwt', 'access_token_expire_minutes', default=10080)

    # ==========================================================================
    # Database Settings
    # ==========================================================================

    @property
    def MONGO_URI(self) -> str:
        """MongoDB connection URI."""
        return self._get_value('MONGO_URI', 'database', 'mongo_uri', default='mongodb://localhost:27017')

    @property
    def MONGO_DB(self) -> str:
        """Database name."""
        return self._get_value('MONGO_DB', 'database', 'name', default='tijara')

    @property
    def MONGO_USE_TRANSACTIONS(self) -> bool:
        """Group multi-document writes in transactions (requires a replica set)."""
        return self._get_bool('MONGO_USE_TRANSACTIONS', 'database', 'use_transactions', default=False)

    @property
    def MONGO_SERVER_SELECTION_TIMEOUT_MS(self) -> int:
        return self._get_int(None, 'database', 'server_selection_timeout_ms', default=5000)

    # ==========================================================================
    # CORS / Socket.IO Settings
    # ==========================================================================

    @property
    def CORS_ORIGINS(self) -> str:
        """Allowed CORS origins (comma separated or '*')."""
        return self._get_value('CORS_ORIGINS', 'cors', 'origins', default='*')

    @property
    def CORS_ORIGINS_LIST(self) -> list:
        """Get CORS origins as a list."""
        origins = self.CORS_ORIGINS
        if origins == '*':
            return ['*']
        return [o.strip() for o in origins.split(',') if o.strip()]

    @property
    def SOCKETIO_PING_TIMEOUT(self) -> int:
        """Seconds without a pong before a socket is considered gone."""
        return self._get_int(None, 'socketio', 'ping_timeout', default=30)

    @property
    def SOCKETIO_PING_INTERVAL(self) -> int:
        return self._get_int(None, 'socketio', 'ping_interval', default=25)

    # ==========================================================================
    # Logging Settings
    # ==========================================================================

    @property
    def LOG_LEVEL(self) -> str:
        """Logging level."""
        return str(self._get_value('LOG_LEVEL', 'logging', 'level', default='INFO')).upper()

    @property
    def LOG_FORMAT(self) -> str:
        return self._get_value(
            'LOG_PATTERN', 'logging', 'pattern',
            default='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    # ==========================================================================
    # Messaging / Notification Settings
    # ==========================================================================

    @property
    def NOTIFY_RECIPIENT_ON_MESSAGE(self) -> bool:
        """Create a NEW_MESSAGE notification for the recipient of each message."""
        return self._get_bool(None, 'messaging', 'notify_recipient', default=True)

    @property
    def MESSAGES_PAGE_SIZE(self) -> int:
        return self._get_int(None, 'messaging', 'page_size', default=20)

    @property
    def MESSAGES_MAX_PAGE_SIZE(self) -> int:
        return self._get_int(None, 'messaging', 'max_page_size', default=100)

    @property
    def NOTIFICATIONS_PAGE_SIZE(self) -> int:
        return self._get_int(None, 'notifications', 'page_size', default=20)

    @property
    def NOTIFICATIONS_MAX_PAGE_SIZE(self) -> int:
        return self._get_int(None, 'notifications', 'max_page_size', default=50)

    # ==========================================================================
    # Validation Methods
    # ==========================================================================

    def validate_required(self) -> None:
        """Validate that required configuration values are set.

        Raises RuntimeError if required values are missing. A JWT secret is
        always required; production additionally refuses wildcard CORS and
        the localhost database.
        """
        errors = []

        if not self.JWT_SECRET:
            errors.append('JWT_SECRET environment variable is required')

        if self.IS_PROD:
            if self.MONGO_URI == 'mongodb://localhost:27017':
                errors.append('MONGO_URI should be set to production database in production')
            if self.CORS_ORIGINS == '*':
                errors.append('CORS_ORIGINS should not be "*" in production')

        if errors:
            raise RuntimeError('Configuration errors:\n' + '\n'.join(f'  - {e}' for e in errors))

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as dictionary (for debugging)."""
        return {
            'environment': self.ENV,
            'app': {
                'debug': self.DEBUG,
                'port': self.PORT,
                'name': self.APP_NAME,
                'version': self.APP_VERSION,
            },
            'security': {
                'jwt_algorithm': self.JWT_ALGORITHM,
                'access_token_expire_minutes': self.ACCESS_TOKEN_EXPIRE_MINUTES,
                'jwt_secret_set': bool(self.JWT_SECRET),
            },
            'database': {
                'mongo_uri': '***' if self.MONGO_URI else None,
                'name': self.MONGO_DB,
                'use_transactions': self.MONGO_USE_TRANSACTIONS,
            },
            'cors': {
                'origins': self.CORS_ORIGINS,
            },
            'logging': {
                'level': self.LOG_LEVEL,
            },
        }


# Default config instance for the process
config = Config()


def get_env() -> str:
    return config.ENV


def is_dev() -> bool:
    return config.IS_DEV


def is_prod() -> bool:
    return config.IS_PROD
