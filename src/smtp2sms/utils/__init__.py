"""
SMTP-to-SMS Gateway Utilities
=============================

Shared helper modules for the gateway:

- logger.py          → structured JSON logging
- secrets.py         → AWS Secrets Manager integration
- twilio_client.py   → authenticated Twilio client builder
- idempotency.py     → DynamoDB-based duplicate-mail guard

Everything here is stateless apart from the configured loggers and is safe to
share between concurrent SMTP sessions.
"""

from smtp2sms.utils.logger import get_logger

# ---------------------------------------------------------------------------
# Public exports
# ---------------------------------------------------------------------------
__all__ = [
    "get_logger",
]
