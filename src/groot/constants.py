"""Constants used throughout Groot."""

# Version
VERSION = "0.1.0"

# Directory names
GROOT_DIR = ".groot"
OBJECTS_DIR = "objects"

# File names
HEAD_FILE = "HEAD"
INDEX_FILE = "index"

# Environment variables
REPO_ENV_VAR = "GROOT_REPO"

# Hash algorithm
HASH_ALGORITHM = "sha256"
HASH_LENGTH = 64  # SHA-256 produces 64 hex characters
MIN_PREFIX_LENGTH = 4
SHORT_HASH_LENGTH = 7

# Diff rendering
ADDED_PREFIX = "++"
REMOVED_PREFIX = "--"

# Exit codes
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2
EXIT_DATA_ERROR = 3
EXIT_INTERRUPTED = 130
