# classcal/config.py
CLASSES_PATH = "classes"

# Wire field names, in the order they are stored
PAYLOAD_FIELDS = [
    "date",               # YYYY-MM-DD
    "startTime",          # HH:MM
    "endTime",            # HH:MM
    "className",
    "instructor",
    "description",
]

CLASSES_TAB = "Classes"
CLASSES_HEADERS = ["id"] + PAYLOAD_FIELDS

# Weeks start on Sunday
WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

BACKENDS = ("firebase", "sheets", "memory")
DEFAULT_BACKEND = "firebase"
DEFAULT_TIMEZONE = "UTC"

SHEETS_POLL_SECONDS = 15.0
