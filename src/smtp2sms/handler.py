"""aiosmtpd handler turning one mail submission into one SMS.

Each DATA transaction runs the same linear pipeline:

1. Parse the raw stream and extract the first To recipient and the body
2. Normalize the recipient local part to an E.164 number
3. Claim the Message-ID when a duplicate guard is configured
4. Send the SMS through the dispatcher

The first failing step ends the pipeline with a single rejection. The
result is a SessionOutcome; only handle_DATA turns it into an SMTP reply.
"""

import asyncio
from typing import Optional

from aiosmtpd.smtp import SMTP, Envelope, Session

from smtp2sms.config import Settings
from smtp2sms.dispatch import TwilioDispatcher
from smtp2sms.extractor import ExtractedMessage, extract
from smtp2sms.outcomes import DispatchFailed, Failure, ParseFailure, SessionOutcome, Stage
from smtp2sms.phone import normalize
from smtp2sms.utils.idempotency import DuplicateGuard
from smtp2sms.utils.logger import get_logger

logger = get_logger("smtp2sms.handler")


class GatewayHandler:
    """SMTP handler for the SMS gateway.

    Mail to ``<phone>@<any-domain>`` is sent as an SMS to that phone:
    - 16502530000@gateway.local → +16502530000 (with DEFAULT_REGION=US)
    - +442070313000@gateway.local → +442070313000

    The dispatcher and duplicate guard are created once at startup and
    shared by every session; the handler keeps no per-session state.
    """

    def __init__(
        self,
        settings: Settings,
        dispatcher: TwilioDispatcher,
        duplicate_guard: Optional[DuplicateGuard] = None,
    ):
        self.settings = settings
        self.dispatcher = dispatcher
        self.duplicate_guard = duplicate_guard

    async def handle_DATA(self, server: SMTP, session: Session, envelope: Envelope) -> str:
        """Handle the DATA command (aiosmtpd entry point).

        Returns:
            str: SMTP reply, '250 Message accepted' or '<code> <reason>'
        """
        peer = getattr(session, "peer", None)
        logger.info(
            "handler.data_received: stage=%s peer=%s mail_from=%s rcpt_tos=%s size=%d",
            Stage.RECEIVING.value,
            peer,
            envelope.mail_from,
            envelope.rcpt_tos,
            len(envelope.content or b""),
        )

        try:
            outcome = await self.process(envelope.content or b"")
        except Exception as e:
            logger.error("handler.unexpected_error: error=%s peer=%s", e, peer, exc_info=True)
            return "451 temporary server error"

        return outcome.smtp_response()

    async def process(self, raw: bytes) -> SessionOutcome:
        extracted = extract(raw)
        if isinstance(extracted, Failure):
            stage = Stage.PARSING if isinstance(extracted, ParseFailure) else Stage.EXTRACTING
            return self._reject(stage, extracted)

        destination = normalize(extracted.local_part, self.settings.default_region)
        if isinstance(destination, Failure):
            return self._reject(Stage.NORMALIZING, destination, recipient=extracted.recipient)

        if await self._already_processed(extracted):
            logger.warning(
                "handler.duplicate_skipped: message_id=%s to=%s",
                extracted.message_id,
                destination,
            )
            return SessionOutcome.accept(destination, None, duplicate=True)

        request = self.dispatcher.request(extracted.body, destination)
        result = await self.dispatcher.dispatch(request)
        if isinstance(result, DispatchFailed):
            if not result.timed_out:
                await self._release(extracted)
            logger.error(
                "handler.provider_error: to=%s error=%s",
                destination,
                result.detail,
            )
            return self._reject(Stage.DISPATCHING, result, recipient=extracted.recipient)

        logger.info(
            "handler.sms_sent: to=%s sid=%s",
            destination,
            result.message_id,
        )
        return SessionOutcome.accept(destination, result.message_id)

    def _reject(self, stage: Stage, failure: Failure, recipient: Optional[str] = None) -> SessionOutcome:
        logger.error(
            "handler.rejected: stage=%s reason=%s recipient=%s",
            stage.value,
            failure.reason,
            recipient,
        )
        return SessionOutcome.reject(stage, failure)

    async def _already_processed(self, extracted: ExtractedMessage) -> bool:
        if self.duplicate_guard is None or not extracted.message_id:
            return False
        try:
            return await asyncio.to_thread(self.duplicate_guard.was_processed, extracted.message_id)
        except Exception as e:
            # A guard outage skips the check; the SMS is still sent
            logger.error(
                "handler.idempotency_error: message_id=%s error=%s",
                extracted.message_id,
                e,
            )
            return False

    async def _release(self, extracted: ExtractedMessage) -> None:
        if self.duplicate_guard is None or not extracted.message_id:
            return
        try:
            await asyncio.to_thread(self.duplicate_guard.release, extracted.message_id)
        except Exception as e:
            logger.error(
                "handler.idempotency_release_error: message_id=%s error=%s",
                extracted.message_id,
                e,
            )
