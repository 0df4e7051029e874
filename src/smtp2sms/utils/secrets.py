import json

import boto3

from smtp2sms.utils.logger import get_logger

logger = get_logger("smtp2sms.secrets")


def get_twilio_secrets(secret_name: str, region_name: str = "us-east-1") -> dict:
    """
    Fetch Twilio credentials/config from AWS Secrets Manager.

    Expects the secret value to be a JSON object, e.g.:

        {
          "account_sid": "...",
          "auth_token": "...",
          "phone_number": "+1..."
        }

    Only the keys present are returned; the caller decides what is required.
    """
    if not secret_name:
        msg = "A secret name is required to fetch Twilio secrets"
        logger.error(msg)
        raise RuntimeError(msg)

    logger.info(
        "Fetching Twilio secrets from Secrets Manager",
        extra={"secret_name": secret_name, "region": region_name},
    )

    client = boto3.client("secretsmanager", region_name=region_name)

    resp = client.get_secret_value(SecretId=secret_name)
    secret_str = resp.get("SecretString")

    if not secret_str:
        msg = f"Secret '{secret_name}' has no SecretString payload"
        logger.error(msg)
        raise RuntimeError(msg)

    try:
        data = json.loads(secret_str)
    except json.JSONDecodeError as e:
        logger.error(
            "SecretString is not valid JSON",
            extra={"secret_name": secret_name, "error": str(e)},
        )
        raise

    if not isinstance(data, dict):
        msg = f"Secret '{secret_name}' must be a JSON object"
        logger.error(msg)
        raise RuntimeError(msg)

    # Support the "from_number" spelling used by some deployments
    if "phone_number" not in data and data.get("from_number"):
        data["phone_number"] = data["from_number"]

    return data
