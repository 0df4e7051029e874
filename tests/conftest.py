import logging
import time

import pytest

from smtp2sms.config import Settings
from smtp2sms.utils.logger import get_logger

# Stubs below stand in for the Twilio SDK; nothing here touches the network.


class StubTwilioMsg:
    def __init__(self, sid="SMXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX"):
        self.sid = sid


class StubTwilioClient:
    def __init__(self, error=None, delay=0.0, sid="SMXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX"):
        self.sent = []
        self.error = error
        self.delay = delay
        self.sid = sid
        # Twilio SDK uses client.messages.create(...)
        self.messages = self

    def create(self, body, from_, to):
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.sent.append({"body": body, "from_": from_, "to": to})
        return StubTwilioMsg(self.sid)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)

    def messages(self):
        return [r.getMessage() for r in self.records]


LOGGER_NAMES = (
    "smtp2sms.handler",
    "smtp2sms.phone",
    "smtp2sms.extractor",
    "smtp2sms.dispatch",
    "smtp2sms.gateway",
)


@pytest.fixture
def log_capture():
    """Collect records from the gateway loggers (they do not propagate to root)."""
    handler = ListHandler()
    loggers = [get_logger(name) for name in LOGGER_NAMES]
    for logger in loggers:
        logger.addHandler(handler)
    yield handler
    for logger in loggers:
        logger.removeHandler(handler)


@pytest.fixture
def settings():
    return Settings(
        twilio_account_sid="ACxxx",
        twilio_auth_token="tok",
        twilio_phone_number="+16505550100",
        default_region="US",
        dispatch_timeout=5.0,
    )


@pytest.fixture
def twilio_stub():
    return StubTwilioClient()


def make_mail(to="16502530000@gateway.local", text=None, html=None, headers=None) -> bytes:
    """Build a raw RFC 5322 message; both bodies given → multipart/alternative.

    Single-part bodies are written without a trailing line break so the parsed
    content equals the given text.
    """
    lines = []
    if to is not None:
        lines.append(f"To: {to}")
    lines.append("From: sender@example.com")
    lines.append("Subject: test")
    for name, value in (headers or {}).items():
        lines.append(f"{name}: {value}")
    lines.append("MIME-Version: 1.0")

    if text is not None and html is not None:
        lines += [
            'Content-Type: multipart/alternative; boundary="BOUNDARY"',
            "",
            "--BOUNDARY",
            'Content-Type: text/plain; charset="utf-8"',
            "",
            text,
            "--BOUNDARY",
            'Content-Type: text/html; charset="utf-8"',
            "",
            html,
            "--BOUNDARY--",
            "",
        ]
    elif html is not None:
        lines += ['Content-Type: text/html; charset="utf-8"', "", html]
    else:
        lines += ['Content-Type: text/plain; charset="utf-8"', "", text or ""]

    return "\r\n".join(lines).encode("utf-8")
