APP_NAME = "Recurring Budget"
DB_FILE = "budget.db"
DEFAULT_USER_NAME = "default"
DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Cycle anchor defaults when cycle_details leaves a field unset
DEFAULT_DAY_OF_WEEK = 1      # Monday (0 = Sunday)
DEFAULT_DAY_OF_MONTH = 1
DEFAULT_MONTH_OF_YEAR = 1

DEFAULT_REMINDER_DAYS = 1
MAX_REMINDER_DAYS = 30
UPCOMING_DAYS = 30

TITLE_MAX_LEN = 50
DESCRIPTION_MAX_LEN = 200
TAG_MAX_LEN = 20
REMARKS_MAX_LEN = 200
CATEGORY_NAME_MAX_LEN = 30

STATUS_INACTIVE = "inactive"
STATUS_OVERDUE = "overdue"
STATUS_DUE_TODAY = "due_today"
STATUS_REMINDER = "reminder"
STATUS_SCHEDULED = "scheduled"

DEFAULT_CATEGORIES = [
    {"name": "Food & Dining",  "color_hex": "#ef4444", "icon": "utensils",     "is_system": 1},
    {"name": "Transportation", "color_hex": "#3b82f6", "icon": "car",          "is_system": 1},
    {"name": "Shopping",       "color_hex": "#8b5cf6", "icon": "shopping-bag", "is_system": 1},
    {"name": "Entertainment",  "color_hex": "#f59e0b", "icon": "film",         "is_system": 1},
    {"name": "Utilities",      "color_hex": "#10b981", "icon": "zap",          "is_system": 1},
    {"name": "Healthcare",     "color_hex": "#ec4899", "icon": "heart",        "is_system": 1},
    {"name": "Education",      "color_hex": "#6366f1", "icon": "book",         "is_system": 1},
    {"name": "Travel",         "color_hex": "#14b8a6", "icon": "plane",        "is_system": 1},
]

SEVERITY_ORDER = {
    "error":   0,
    "warning": 1,
    "info":    2,
}
