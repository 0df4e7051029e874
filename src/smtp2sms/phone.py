from typing import Union

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

from smtp2sms.outcomes import NormalizationFailure
from smtp2sms.utils.logger import get_logger

logger = get_logger("smtp2sms.phone")


def normalize(raw: str, region: str = "US") -> Union[str, NormalizationFailure]:
    """
    Normalize a recipient local part to an E.164 phone number.

    `region` is the two-letter region used when `raw` carries no country code.
    Returns the E.164 string (e.g. "+16502530000") or a NormalizationFailure
    holding the original input. Never raises.
    """
    try:
        number = phonenumbers.parse(raw, region)
    except NumberParseException as e:
        return _failed(raw, str(e))

    if not phonenumbers.is_valid_number(number):
        return _failed(raw, "not a valid number for its numbering plan")

    return phonenumbers.format_number(number, PhoneNumberFormat.E164)


def _failed(raw: str, detail: str) -> NormalizationFailure:
    logger.error("phone.normalization_failed: raw=%r error=%s", raw, detail)
    return NormalizationFailure(raw=raw, detail=detail)
