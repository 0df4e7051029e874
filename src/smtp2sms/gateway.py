"""Gateway process for the SMTP-to-SMS bridge.

Loads configuration, builds the shared Twilio client, and serves SMTP with
aiosmtpd until SIGINT/SIGTERM.

Usage:
    smtp2sms
    python -m smtp2sms

Environment Variables:
    SMTP_HOST: Bind address (default: 0.0.0.0)
    SMTP_PORT: Listen port (default: 8025)
    SMTP_SERVER_HOSTNAME: Name used in the SMTP greeting (default: smtp2sms.local)
    SMTP_IDLE_TIMEOUT: Seconds a client may stay idle (default: 300)
    SMTP_MAX_MESSAGE_SIZE: Max email size in bytes (default: 1048576)
    TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN / TWILIO_PHONE_NUMBER: required
    TWILIO_SECRET_NAME: Secrets Manager secret supplying missing Twilio values
    DEFAULT_REGION: Region for numbers without a country code (default: US)
    DISPATCH_TIMEOUT: Seconds allowed for one Twilio send (default: 30)
    IDEMPOTENCY_TABLE: DynamoDB table enabling duplicate-mail suppression
"""

import signal
import sys
import threading

from aiosmtpd.controller import Controller
from dotenv import load_dotenv

from smtp2sms.config import ConfigError, Settings, load_settings
from smtp2sms.dispatch import TwilioDispatcher
from smtp2sms.handler import GatewayHandler
from smtp2sms.utils.idempotency import DuplicateGuard
from smtp2sms.utils.logger import get_logger, set_level
from smtp2sms.utils.twilio_client import build_client

logger = get_logger("smtp2sms.gateway")

EXIT_CONFIG_ERROR = 1


def build_handler(settings: Settings, twilio_client=None) -> GatewayHandler:
    """Wire the dispatcher and optional duplicate guard into a handler."""
    if twilio_client is None:
        twilio_client = build_client(
            settings.twilio_account_sid,
            settings.twilio_auth_token,
            timeout=settings.dispatch_timeout,
        )

    dispatcher = TwilioDispatcher(
        twilio_client,
        settings.twilio_phone_number,
        timeout=settings.dispatch_timeout,
    )

    duplicate_guard = None
    if settings.idempotency_table:
        duplicate_guard = DuplicateGuard(
            settings.idempotency_table,
            region_name=settings.aws_region,
            ttl_secs=settings.idempotency_ttl_seconds,
        )
        logger.info("Duplicate guard enabled: table=%s", settings.idempotency_table)

    return GatewayHandler(settings, dispatcher, duplicate_guard=duplicate_guard)


def build_controller(handler: GatewayHandler, settings: Settings) -> Controller:
    # AUTH is not offered: no authenticator is installed.
    return Controller(
        handler,
        hostname=settings.smtp_host,
        port=settings.smtp_port,
        server_hostname=settings.smtp_server_hostname,
        enable_SMTPUTF8=True,
        data_size_limit=settings.smtp_max_message_size,
        timeout=settings.smtp_idle_timeout,
    )


def main() -> None:
    """Start the gateway and block until a shutdown signal arrives."""
    load_dotenv()

    try:
        settings = load_settings()
    except ConfigError as e:
        logger.error("Gateway startup failed: %s", e)
        sys.exit(EXIT_CONFIG_ERROR)
    except Exception as e:
        # Secrets Manager lookups surface boto3 errors here
        logger.error("Gateway startup failed: %s", e, exc_info=True)
        sys.exit(EXIT_CONFIG_ERROR)

    set_level(settings.log_level)

    try:
        handler = build_handler(settings)
        controller = build_controller(handler, settings)
        controller.start()
    except Exception as e:
        logger.error("Gateway startup failed: %s", e, exc_info=True)
        sys.exit(EXIT_CONFIG_ERROR)

    logger.info(
        "SMTP-to-SMS gateway running on %s:%s (region=%s)",
        settings.smtp_host,
        settings.smtp_port,
        settings.default_region,
    )

    stop = threading.Event()

    def _shutdown(signum, _frame):
        logger.info("Received signal %s, shutting down", signum)
        stop.set()

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    try:
        # Wake up periodically so signals are handled promptly
        while not stop.wait(1.0):
            pass
    finally:
        controller.stop()
        logger.info("SMTP server stopped")


if __name__ == "__main__":
    main()
