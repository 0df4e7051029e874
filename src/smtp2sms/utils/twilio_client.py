# utils/twilio_client.py

from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client as TwilioClient

from smtp2sms.utils.logger import get_logger

logger = get_logger("smtp2sms.twilio_client")


def build_client(account_sid: str, auth_token: str, timeout: float = 30.0):
    """
    Build and return an authenticated Twilio client.

    The client is created once at startup and shared by every SMTP session;
    it only makes stateless outbound calls. `timeout` bounds each HTTP request
    to the Twilio API in seconds.
    """
    missing = [
        name
        for name, value in [
            ("account_sid", account_sid),
            ("auth_token", auth_token),
        ]
        if not value
    ]

    if missing:
        logger.error("Missing Twilio credentials", extra={"missing": missing})
        raise RuntimeError(f"Missing Twilio credentials: {', '.join(missing)}")

    http_client = TwilioHttpClient(timeout=timeout)
    client = TwilioClient(account_sid, auth_token, http_client=http_client)
    logger.info("Twilio client initialized successfully")

    return client
