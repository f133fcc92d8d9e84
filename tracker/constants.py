DAY_ABBREVIATIONS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

TRAILING_WEEKS = 5

GRID_SIZE = 9
GRID_COLUMNS = 3
CENTER_POSITION = 5

# First habit in the user's list always renders in this colour.
RESERVED_HABIT_COLOR = "#2196F3"
HABIT_COLORS = [
    "#4CAF50",  # Green
    "#FF9800",  # Orange
    "#9C27B0",  # Purple
    "#F44336",  # Red
    "#00BCD4",  # Cyan
    "#FFEB3B",  # Yellow
    "#795548",  # Brown
    "#607D8B",  # Blue Grey
    "#E91E63",  # Pink
    "#3F51B5",  # Indigo
    "#009688",  # Teal
    "#FF5722",  # Deep Orange
    "#673AB7",  # Deep Purple
    "#CDDC39",  # Lime
]

CACHE_TTL_SECONDS = 5 * 60
REQUEST_TIMEOUT_SECONDS = 10

UNCATEGORIZED_LABEL = "Uncategorized"
DEFAULT_TIMES_PER_DAY = 1
MAX_TIMES_PER_DAY = 10

CONTACT_METHODS = ["email", "phone"]

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
EXPIRES_AT_KEY = "expiresAt"
USER_KEY = "user"
PROFILE_KEY = "userProfile"
