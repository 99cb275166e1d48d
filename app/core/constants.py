"""Application constants.

Field limits, pagination bounds, and storage key conventions for candidates.
"""

# ---------------------------------------------------------------------------
# Field limits
# ---------------------------------------------------------------------------
NAME_MAX_LENGTH: int = 100
POSITION_MAX_LENGTH: int = 100
NOTES_MAX_LENGTH: int = 1000

# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------
DEFAULT_PAGE_SIZE: int = 20
MIN_PAGE_SIZE: int = 1
MAX_PAGE_SIZE: int = 100

# ---------------------------------------------------------------------------
# Storage keys
# Partition key format: CANDIDATE_<yyyy>-<mm> (table keys may not contain
# '#', '/', '\' or '?').
# ---------------------------------------------------------------------------
PARTITION_KEY_PREFIX: str = "CANDIDATE"
CANDIDATE_ENTITY_NAME: str = "Candidate"
