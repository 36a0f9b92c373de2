"""
ZKBallot Constants

Protocol defaults for the ballot plus the logger settings read from
``.env``. Logger settings are exposed as module attributes (``LOG_LEVEL``,
``LOG_FILE_OUTPUT``, ...) that remember their built-in default.
"""
import ast

from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT
# =============================================================================
_env = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                'INFO',
    'LOG_FORMAT':               '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':          '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING': 'True',
    'LOG_FILE_OUTPUT':          'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
LOG_BACKUP_COUNT = 5


# =============================================================================
# VOTING PARAMETERS
# =============================================================================
DEFAULT_VOTING_PERIOD_SECONDS = 3 * 24 * 60 * 60  # 3 days
DEFAULT_REVEAL_PERIOD_SECONDS = 24 * 60 * 60      # 1 day
DEFAULT_MINIMUM_QUORUM = 10                        # percent

# Floor applied when the admin updates the default periods
MIN_PERIOD_SECONDS = 60 * 60  # 1 hour
MAX_QUORUM_PERCENT = 100

# Weight applied to a voter with no explicit voting power
DEFAULT_VOTING_POWER = 1


# =============================================================================
# HASHES AND ROLES
# =============================================================================
HASH_SIZE = 32
SALT_SIZE = 32
ZERO_HASH = b"\x00" * HASH_SIZE

DEFAULT_ADMIN_ROLE_NAME = "DEFAULT_ADMIN_ROLE"
ADMIN_ROLE_NAME = "ADMIN_ROLE"
PROPOSER_ROLE_NAME = "PROPOSER_ROLE"


# =============================================================================
# SETTING WRAPPERS
# =============================================================================
class ConfigString(str):
    """A string setting carrying its built-in default."""

    def __new__(cls, value, default):
        obj = super().__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default


class ConfigBool(int):
    """A boolean setting carrying its built-in default."""

    def __new__(cls, value, default):
        obj = super().__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __eq__(self, other):
        return bool(self) == other

    def __hash__(self):
        return hash(bool(self))

    def __str__(self):
        return str(bool(self))

    __repr__ = __str__


def parse_bool(v):
    """"true"/"false" in any case become bools; anything else is returned as is."""
    if isinstance(v, str) and v.strip().casefold() in ("true", "false"):
        return ast.literal_eval(v.strip().title())
    return v


def _load_setting(key, default_raw):
    # dotenv_values yields None for keys without a value
    raw = _env.get(key)
    value = parse_bool(default_raw if raw is None else raw)
    default = parse_bool(default_raw)
    if isinstance(value, bool):
        return ConfigBool(value, default)
    return ConfigString(default_raw if raw is None else raw, default)


LOG_LEVEL = _load_setting('LOG_LEVEL', LOGGER_DEFAULTS['LOG_LEVEL'])
LOG_FORMAT = _load_setting('LOG_FORMAT', LOGGER_DEFAULTS['LOG_FORMAT'])
LOG_DATE_FORMAT = _load_setting('LOG_DATE_FORMAT', LOGGER_DEFAULTS['LOG_DATE_FORMAT'])
LOG_CONSOLE_HIGHLIGHTING = _load_setting('LOG_CONSOLE_HIGHLIGHTING', LOGGER_DEFAULTS['LOG_CONSOLE_HIGHLIGHTING'])
LOG_FILE_OUTPUT = _load_setting('LOG_FILE_OUTPUT', LOGGER_DEFAULTS['LOG_FILE_OUTPUT'])
