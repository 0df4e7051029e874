import os
from dataclasses import dataclass
from typing import Optional

from smtp2sms.utils.secrets import get_twilio_secrets


class ConfigError(RuntimeError):
    """Fatal startup configuration problem."""


class ConfigMissing(ConfigError):
    pass


class ConfigInvalid(ConfigError):
    pass


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration. Built once at startup and never mutated."""

    twilio_account_sid: str
    twilio_auth_token: str
    twilio_phone_number: str
    smtp_host: str = "0.0.0.0"
    smtp_port: int = 8025
    smtp_server_hostname: str = "smtp2sms.local"
    smtp_idle_timeout: int = 300
    smtp_max_message_size: int = 1048576
    default_region: str = "US"
    dispatch_timeout: float = 30.0
    aws_region: str = "us-east-1"
    idempotency_table: Optional[str] = None
    idempotency_ttl_seconds: int = 86400
    log_level: str = "INFO"


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        msg = f"Invalid {name}='{raw}'. Must be an integer."
        raise ConfigInvalid(msg)


def _float_env(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except ValueError:
        msg = f"Invalid {name}='{raw}'. Must be a number of seconds."
        raise ConfigInvalid(msg)


def load_settings() -> Settings:
    """
    Load gateway settings from the environment.

    TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN and TWILIO_PHONE_NUMBER are required.
    When any of them is missing and TWILIO_SECRET_NAME is set, the gaps are
    filled from that AWS Secrets Manager secret.

    Raises ConfigMissing / ConfigInvalid with a clear message on bad config.
    """
    account_sid = os.getenv("TWILIO_ACCOUNT_SID")
    auth_token = os.getenv("TWILIO_AUTH_TOKEN")
    phone_number = os.getenv("TWILIO_PHONE_NUMBER")
    aws_region = os.getenv("AWS_REGION", "us-east-1")
    secret_name = os.getenv("TWILIO_SECRET_NAME")

    if secret_name and not (account_sid and auth_token and phone_number):
        secrets = get_twilio_secrets(secret_name, aws_region)
        account_sid = account_sid or secrets.get("account_sid")
        auth_token = auth_token or secrets.get("auth_token")
        phone_number = phone_number or secrets.get("phone_number")

    missing = []
    if not account_sid:
        missing.append("TWILIO_ACCOUNT_SID")
    if not auth_token:
        missing.append("TWILIO_AUTH_TOKEN")
    if not phone_number:
        missing.append("TWILIO_PHONE_NUMBER")

    if missing:
        msg = f"Missing required environment variables: {', '.join(missing)}"
        raise ConfigMissing(msg)

    return Settings(
        twilio_account_sid=account_sid,
        twilio_auth_token=auth_token,
        twilio_phone_number=phone_number,
        smtp_host=os.getenv("SMTP_HOST", "0.0.0.0"),
        smtp_port=_int_env("SMTP_PORT", "8025"),
        smtp_server_hostname=os.getenv("SMTP_SERVER_HOSTNAME", "smtp2sms.local"),
        smtp_idle_timeout=_int_env("SMTP_IDLE_TIMEOUT", "300"),
        smtp_max_message_size=_int_env("SMTP_MAX_MESSAGE_SIZE", "1048576"),
        default_region=os.getenv("DEFAULT_REGION", "US").upper(),
        dispatch_timeout=_float_env("DISPATCH_TIMEOUT", "30"),
        aws_region=aws_region,
        idempotency_table=os.getenv("IDEMPOTENCY_TABLE") or None,
        idempotency_ttl_seconds=_int_env("IDEMPOTENCY_TTL_SECONDS", "86400"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
