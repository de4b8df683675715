"""
Application-wide constants
"""


class APP_SETTINGS:
    """Application metadata"""
    APP_NAME = "Calhook Calendar Agent"
    VERSION = "1.0.0"
    DESCRIPTION = "Webhook and Slack front-end for Google Calendar operations"


class CALENDAR_SETTINGS:
    """Calendar settings"""
    PRIMARY_CALENDAR_ID = "primary"
    DEFAULT_MAX_RESULTS = 10
    MAX_RESULTS_LIMIT = 2500  # Google Calendar API upper bound for maxResults


class GOOGLE_CALENDAR_SETTINGS:
    """Google Calendar settings"""
    SCOPES = ["https://www.googleapis.com/auth/calendar"]
    API_VERSION = "v3"
    AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
    TOKEN_URI = "https://oauth2.googleapis.com/token"


class TOOL_NAMES:
    """Names of the calendar tools accepted by the dispatcher"""
    CREATE_EVENT = "create_calendar_event"
    LIST_EVENTS = "list_calendar_events"
    UPDATE_EVENT = "update_calendar_event"
    DELETE_EVENT = "delete_calendar_event"
    CONFIRM_EVENT = "confirm_calendar_event"


class SLACK_SETTINGS:
    """Slack delivery settings"""
    REQUEST_TIMEOUT = 10.0
    MAX_DELIVERY_ATTEMPTS = 2  # first attempt plus a single retry


DEFAULT_USER_ID = "default"

NOT_AUTHENTICATED_MESSAGE = "User not authenticated. Please visit /auth first."

CONFIRMATION_PROMPT = (
    'Should I create this event? Reply "yes" to confirm or tell me what to change.'
)
