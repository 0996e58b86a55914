"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# String field lengths
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_ROLE_NAME_LENGTH = 255
MAX_PERMISSION_NAME_LENGTH = 255
MAX_PERMISSION_PART_LENGTH = 255
MAX_ACTIVITY_ACTION_LENGTH = 255
MAX_RESOURCE_TYPE_LENGTH = 255

# Permission names: "resource:action", either half may be "*"
PERMISSION_NAME_PATTERN = r"[A-Za-z0-9_*]+:[A-Za-z0-9_*]+"
PERMISSION_SEPARATOR = ":"
WILDCARD = "*"

# Password requirements
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
BCRYPT_ROUNDS = 12

# Pagination defaults
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Dashboard
RECENT_ACTIVITY_LIMIT = 10

# Token settings
ACCESS_TOKEN_JTI_LENGTH = 32

# Secret key requirements
MIN_SECRET_KEY_LENGTH = 32
DEFAULT_INSECURE_SECRET = "change-me-in-production"
