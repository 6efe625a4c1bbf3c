from __future__ import annotations

"""
Domain Constants.

Centralizes the fixed tags, formats and templates shared by the writer,
the retention sweeper and the alert forwarder.
"""

# -----------------------------------------------------------------------------
# LINE TAGS
# -----------------------------------------------------------------------------
TAG_STARTED = "Started"
TAG_COMPLETED = "Completed"
TAG_INFO = "Info"
TAG_ERROR = "ERROR"
TAG_ALERT = "ALERT"
TAG_COMPLETED_ERROR = "Completed : ERROR"
TAG_COMPLETED_ALERT = "Completed : ALERT"

FIELD_SEPARATOR = " : "

# Title used by tracelog for its own bookkeeping lines
INTERNAL_TITLE = "main"

# -----------------------------------------------------------------------------
# RECORD FORMATTING
# -----------------------------------------------------------------------------
LINE_FORMAT = "%(levelname)s: %(asctime)s %(filename)s:%(lineno)d: %(message)s"
LINE_DATEFMT = "%Y/%m/%d %H:%M:%S"

# -----------------------------------------------------------------------------
# FILE LAYOUT
# -----------------------------------------------------------------------------
DIRECTORY_DATE_FORMAT = "%Y-%m-%d"
FILE_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"
LOG_FILE_EXTENSION = ".txt"
DEFAULT_DAYS_TO_KEEP = 7

# -----------------------------------------------------------------------------
# ALERTS
# -----------------------------------------------------------------------------
SYSTEM_ALERT_SUBJECT = "TraceLog Exception"
DEFAULT_SMTP_PORT = 587
DEFAULT_SMTP_TIMEOUT = 10

DEFAULT_EMAIL_TEMPLATE = """From: $From
To: $To
Subject: $Subject
MIME-version: 1.0
Content-Type: text/html; charset="UTF-8"

<html><body>$Message</body></html>"""
