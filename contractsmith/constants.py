"""
Contractsmith Constants

This module consolidates the global constants and `.env` configuration used
throughout the codebase. Values that operators may change are read once from
`.env` at import time; everything else is fixed.
"""
import ast
import re
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

SERVICE_DEFAULTS = {
    'CONTRACTSMITH_HOST':              '127.0.0.1',
    'CONTRACTSMITH_PORT':              '8888',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# COMPILATION DEFAULTS
# ==================================================================================
SERVICE_VERSION = '1.0.0'

DEFAULT_TEMPLATE_NAME = 'EthTemplate.sol'
DEFAULT_CONTRACT_NAME = 'StonerSharks'
DEFAULT_TEMPLATES_DIR = 'templates'
DEFAULT_IMPORT_PREFIXES = ('@openzeppelin',)
DEFAULT_SOLC_VERSION = '0.8.24'

# Substitutions available to the bundled template when none are configured
DEFAULT_TEMPLATE_VARIABLES = {
    'SOLIDITY_PRAGMA':  '^0.8.20',
    'TOKEN_NAME':       'Stoner Sharks',
    'TOKEN_SYMBOL':     'SHARK',
    'MAX_SUPPLY':       10000,
    'MINT_PRICE_WEI':   0,
    'BASE_URI':         'ipfs://',
}

# Message handed back to the compiler for an import that cannot be supplied
IMPORT_NOT_FOUND = 'File not found'

SOURCE_LANGUAGE = 'Solidity'

# Select every output for every file and every contract
OUTPUT_SELECTION_ALL = {'*': {'*': ['*']}}


# ==================================================================================
# VALIDATION PATTERNS
# ==================================================================================
# Template placeholders: ${NAME}; "$${" renders a literal "${"
PLACEHOLDER_PATTERN = re.compile(r'\$(\$)?\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}')

# solc reports an import it could not load as: Source "<path>" not found: <reason>
MISSING_SOURCE_PATTERN = re.compile(r'^Source "(?P<path>[^"]+)" not found: (?P<reason>.*)$', re.DOTALL)

# Unlinked library references left in bytecode by solc
LIBRARY_PLACEHOLDER_MARKER = '__$'


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = SERVICE_DEFAULTS | LOGGER_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        # ast.literal_eval expects "True"/"False"
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    # Parses only boolean-literals. Leaves other values untouched.
    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        # Preserves the original raw string for ConfigString storage.
        namespace[key] = ConfigString(value_raw, default_val)
