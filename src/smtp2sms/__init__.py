"""
SMTP-to-SMS Gateway
===================

Root package for the SMTP gateway that turns inbound mail into outbound SMS.
Mail addressed to ``<phone>@<any-domain>`` is parsed, the local part is
normalized to an E.164 number and the message body is sent through Twilio.

Modules under this package:
- config.py     → environment-driven, immutable settings
- outcomes.py   → per-submission failure values and the session outcome
- phone.py      → phone number normalization (E.164)
- extractor.py  → recipient and body extraction from raw mail
- dispatch.py   → Twilio send adapter
- handler.py    → aiosmtpd handler running the per-session pipeline
- gateway.py    → process bootstrap (python -m smtp2sms)
- utils/        → shared helpers (logging, secrets, Twilio client, idempotency)

Environment variables expected:
  • TWILIO_ACCOUNT_SID         - Twilio account identifier
  • TWILIO_AUTH_TOKEN          - Twilio auth token
  • TWILIO_PHONE_NUMBER        - Sender number for every SMS
  • SMTP_PORT                  - Listening port (default: 8025)
  • DEFAULT_REGION             - Region for numbers without a country code (default: US)
  • TWILIO_SECRET_NAME         - Secrets Manager secret with Twilio values (optional)
  • IDEMPOTENCY_TABLE          - DynamoDB table for duplicate-mail prevention (optional)
  • LOG_LEVEL                  - Log verbosity (default: INFO)
"""

__version__ = "1.0.0"
__author__ = "smtp2sms maintainers"
__license__ = "MIT"

# Expose top-level package metadata only
__all__ = ["__version__", "__author__"]
