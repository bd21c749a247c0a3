"""Static integration catalog.

Graph nodes only carry an integration id; icon and color are looked up here
when a node leaves the API.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any


class IconKind(str, Enum):
    """Icon tags understood by the front end's renderer table."""

    ACTIVITY = "activity"
    BAR_CHART = "bar-chart"
    BOT = "bot"
    BRAIN = "brain"
    CALENDAR = "calendar"
    CLOCK = "clock"
    CREDIT_CARD = "credit-card"
    DATABASE = "database"
    FILE_TEXT = "file-text"
    FILE_UP = "file-up"
    FILTER = "filter"
    FOLDER = "folder"
    FORM_INPUT = "form-input"
    GIT_BRANCH = "git-branch"
    GLOBE = "globe"
    MAIL = "mail"
    MESSAGE_SQUARE = "message-square"
    REPEAT = "repeat"
    SHUFFLE = "shuffle"
    TABLE = "table"
    TIMER = "timer"
    USERS = "users"
    ZAP = "zap"


TRIGGER = "trigger"
ACTION = "action"


@dataclass(frozen=True)
class Integration:
    id: str
    name: str
    description: str
    category: str
    type: str  # trigger/action
    color: str
    icon: IconKind
    requires_auth: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["icon"] = self.icon.value
        return data


_CATALOG: tuple[Integration, ...] = (
    # Triggers
    Integration("webhook", "Webhook Trigger", "Start a workflow from an incoming HTTP request",
                "webhook", TRIGGER, "#8B5CF6", IconKind.ZAP),
    Integration("schedule", "Schedule Trigger", "Trigger a workflow on a cron schedule",
                "triggers", TRIGGER, "#10B981", IconKind.CLOCK),
    Integration("email_received", "Email Trigger", "Trigger when a new email arrives",
                "triggers", TRIGGER, "#10B981", IconKind.MAIL, True),
    Integration("form_submit", "Form Submission", "Trigger when a form is submitted",
                "triggers", TRIGGER, "#10B981", IconKind.FORM_INPUT),
    Integration("file_upload", "File Upload Trigger", "Trigger when a file is uploaded",
                "triggers", TRIGGER, "#10B981", IconKind.FILE_UP),
    Integration("gmail_new_email", "Gmail New Email", "Trigger on new Gmail messages",
                "communication", TRIGGER, "#EA4335", IconKind.MAIL, True),
    # Communication
    Integration("email", "Send Email", "Send an email message",
                "communication", ACTION, "#3B82F6", IconKind.MAIL, True),
    Integration("gmail_send", "Gmail Send Email", "Send an email through Gmail",
                "communication", ACTION, "#EA4335", IconKind.MAIL, True),
    Integration("sendgrid", "SendGrid", "Send transactional email with SendGrid",
                "communication", ACTION, "#1A82E2", IconKind.MAIL, True),
    Integration("slack", "Slack", "Post a message to a Slack channel",
                "communication", ACTION, "#4A154B", IconKind.MESSAGE_SQUARE, True),
    Integration("teams", "Microsoft Teams", "Post a message to a Teams channel",
                "communication", ACTION, "#6264A7", IconKind.MESSAGE_SQUARE, True),
    Integration("sms", "Send SMS", "Send a text message",
                "communication", ACTION, "#F22F46", IconKind.MESSAGE_SQUARE, True),
    Integration("discord", "Discord", "Post a message to a Discord channel",
                "communication", ACTION, "#5865F2", IconKind.MESSAGE_SQUARE, True),
    # CRM
    Integration("salesforce", "Salesforce", "Create or update Salesforce records",
                "crm", ACTION, "#00A1E0", IconKind.USERS, True),
    Integration("hubspot", "HubSpot", "Create HubSpot contacts and deals",
                "crm", ACTION, "#FF7A59", IconKind.USERS, True),
    Integration("pipedrive", "Pipedrive", "Create Pipedrive persons and deals",
                "crm", ACTION, "#017737", IconKind.USERS, True),
    Integration("airtable", "Airtable", "Create and update Airtable records",
                "productivity", ACTION, "#18BFFF", IconKind.TABLE, True),
    # Webhooks / HTTP
    Integration("http_request", "HTTP Request", "Call an external HTTP endpoint",
                "webhook", ACTION, "#4B5563", IconKind.GLOBE),
    # AI
    Integration("openai", "OpenAI LLM", "Generate text with an OpenAI model",
                "ai", ACTION, "#10A37F", IconKind.BOT, True),
    Integration("anthropic", "Claude LLM", "Generate text with a Claude model",
                "ai", ACTION, "#CC785C", IconKind.BRAIN, True),
    # Logic and data
    Integration("condition", "Condition", "Branch on a condition",
                "logic", ACTION, "#F59E0B", IconKind.GIT_BRANCH),
    Integration("delay", "Delay", "Wait before continuing",
                "logic", ACTION, "#6B7280", IconKind.TIMER),
    Integration("loop", "Loop", "Repeat steps over a list of items",
                "logic", ACTION, "#6366F1", IconKind.REPEAT),
    Integration("data_transform", "Data Transform", "Map and reshape data",
                "data", ACTION, "#3B82F6", IconKind.SHUFFLE),
    Integration("data_validation", "Data Validation", "Validate data against a schema",
                "data", ACTION, "#059669", IconKind.FILTER),
    # Databases
    Integration("postgresql", "PostgreSQL", "Read and write PostgreSQL rows",
                "database", ACTION, "#336791", IconKind.DATABASE, True),
    Integration("mysql", "MySQL", "Read and write MySQL rows",
                "database", ACTION, "#4479A1", IconKind.DATABASE, True),
    Integration("mongodb", "MongoDB", "Read and write MongoDB documents",
                "database", ACTION, "#47A248", IconKind.DATABASE, True),
    Integration("supabase", "Supabase", "Read and write Supabase tables",
                "database", ACTION, "#3ECF8E", IconKind.DATABASE, True),
    # File storage
    Integration("google_drive", "Google Drive", "Upload and manage Drive files",
                "file_storage", ACTION, "#4285F4", IconKind.FOLDER, True),
    Integration("dropbox", "Dropbox", "Upload and manage Dropbox files",
                "file_storage", ACTION, "#0061FF", IconKind.FOLDER, True),
    Integration("aws_s3", "AWS S3", "Upload and manage S3 objects",
                "file_storage", ACTION, "#FF9900", IconKind.FOLDER, True),
    # Productivity
    Integration("google_sheets", "Google Sheets", "Read and append spreadsheet rows",
                "productivity", ACTION, "#0F9D58", IconKind.TABLE, True),
    Integration("google_calendar", "Google Calendar", "Create calendar events",
                "productivity", ACTION, "#4285F4", IconKind.CALENDAR, True),
    Integration("notion", "Notion", "Create Notion pages and database entries",
                "productivity", ACTION, "#000000", IconKind.FILE_TEXT, True),
    # Analytics
    Integration("google_analytics", "Google Analytics", "Report analytics events",
                "analytics", ACTION, "#FF6F00", IconKind.BAR_CHART, True),
    Integration("mixpanel", "Mixpanel", "Track Mixpanel events",
                "analytics", ACTION, "#7856FF", IconKind.ACTIVITY, True),
    # Payments
    Integration("stripe", "Stripe", "Create Stripe customers and charges",
                "payment", ACTION, "#635BFF", IconKind.CREDIT_CARD, True),
    Integration("paypal", "PayPal", "Create PayPal payments",
                "payment", ACTION, "#003087", IconKind.CREDIT_CARD, True),
)

_BY_ID: dict[str, Integration] = {item.id: item for item in _CATALOG}


def all_integrations(integration_type: str | None = None) -> list[Integration]:
    if integration_type is None:
        return list(_CATALOG)
    return [item for item in _CATALOG if item.type == integration_type]


def get_integration(integration_id: str | None) -> Integration | None:
    if not isinstance(integration_id, str):
        return None
    return _BY_ID.get(integration_id)


def find_by_name(name: str | None) -> Integration | None:
    """Case-insensitive lookup by display name (first match wins)."""
    if not isinstance(name, str):
        return None
    wanted = " ".join(name.strip().lower().split())
    for item in _CATALOG:
        if item.name.lower() == wanted:
            return item
    return None


def by_category() -> dict[str, list[Integration]]:
    grouped: dict[str, list[Integration]] = {}
    for item in _CATALOG:
        grouped.setdefault(item.category, []).append(item)
    return grouped


def resolve_icon(integration_id: str | None) -> str | None:
    """Return the icon tag for an integration id, or None when unknown."""
    item = get_integration(integration_id)
    return item.icon.value if item else None
