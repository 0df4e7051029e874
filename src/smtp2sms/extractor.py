"""Recipient and body extraction from raw mail.

The raw DATA payload is parsed with the standard library `email` package.
Only the first ``To`` address is used: its local part becomes the phone
number candidate. The plain-text body is preferred; an HTML-only mail is
sent with its markup as-is.
"""

import email
import email.policy
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import getaddresses
from typing import Optional, Union

from smtp2sms.outcomes import EmptyBody, NoRecipient, ParseFailure
from smtp2sms.utils.logger import get_logger

logger = get_logger("smtp2sms.extractor")


@dataclass(frozen=True)
class ExtractedMessage:
    recipient: str
    local_part: str
    body: str
    message_id: Optional[str] = None


def parse_message(raw: bytes) -> Union[EmailMessage, ParseFailure]:
    """Parse raw MIME bytes into an EmailMessage.

    Args:
        raw: DATA payload as received by the SMTP server

    Returns:
        EmailMessage, or ParseFailure when the stream is empty, has no
        header fields, or the parser raises
    """
    if not raw or not raw.strip():
        logger.error("extractor.parse_failed: empty message")
        return ParseFailure(detail="empty message")

    try:
        msg = email.message_from_bytes(raw, policy=email.policy.default)
    except Exception as e:
        logger.error("extractor.parse_failed: error=%s", e)
        return ParseFailure(detail=str(e))

    if not msg.keys():
        logger.error("extractor.parse_failed: no header fields")
        return ParseFailure(detail="no header fields")

    return msg


def first_recipient(msg: EmailMessage) -> Optional[str]:
    """First non-empty address of the To header(s); Cc and Bcc are ignored."""
    headers = [str(value) for value in msg.get_all("To", [])]
    for _name, address in getaddresses(headers):
        if address:
            return address
    return None


def local_part(address: str) -> str:
    """Text before the first "@"; everything from it on is dropped.

    Examples:
        15551234567@gateway.local → '15551234567'
        a@b@c → 'a'
        5551234 → '5551234'
    """
    return address.split("@", 1)[0]


def select_body(msg: EmailMessage) -> Optional[str]:
    """Plain-text body if it has any content, otherwise the HTML body verbatim."""
    text = _body_content(msg, "plain")
    if text and text.strip():
        return text
    return _body_content(msg, "html")


def _body_content(msg: EmailMessage, subtype: str) -> Optional[str]:
    part = msg.get_body(preferencelist=(subtype,))
    if part is None:
        return None
    return part.get_content()


def extract(raw: bytes) -> Union[ExtractedMessage, ParseFailure, NoRecipient, EmptyBody]:
    """Derive the target recipient and the SMS body from a raw mail stream."""
    parsed = parse_message(raw)
    if isinstance(parsed, ParseFailure):
        return parsed

    try:
        recipient = first_recipient(parsed)
        body = select_body(parsed)
        message_id = parsed.get("Message-ID")
    except Exception as e:
        # Malformed headers or an unknown charset surface only when read
        logger.error("extractor.decode_failed: error=%s", e)
        return ParseFailure(detail=str(e))

    if not recipient:
        logger.error("extractor.no_recipient")
        return NoRecipient(detail="no To address")

    if body is None or not body.strip():
        logger.error("extractor.empty_body: recipient=%s", recipient)
        return EmptyBody(detail="no plain-text or HTML content")

    return ExtractedMessage(
        recipient=recipient,
        local_part=local_part(recipient),
        body=body,
        message_id=str(message_id).strip() if message_id else None,
    )
