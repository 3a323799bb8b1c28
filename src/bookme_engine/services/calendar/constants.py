CALENDAR_API_NAME = "calendar"
CALENDAR_API_VERSION = "v3"

DEFAULT_MAX_RESULTS = 250
MAX_RESULTS_LIMIT = 2500

MAX_SUMMARY_LENGTH = 1024
MAX_DESCRIPTION_LENGTH = 8192

SKIPPED_EVENT_STATUSES = ("cancelled",)
