import asyncio
from dataclasses import dataclass
from typing import Union

from smtp2sms.outcomes import DispatchFailed, Dispatched
from smtp2sms.utils.logger import get_logger

logger = get_logger("smtp2sms.dispatch")


@dataclass(frozen=True)
class DispatchRequest:
    body: str
    source: str
    destination: str

    def __post_init__(self):
        if not self.body or not self.body.strip():
            raise ValueError("SMS body must not be empty")


class TwilioDispatcher:
    """
    Sends one SMS per request through a shared Twilio client.

    The Twilio SDK is synchronous, so each call runs in a worker thread and
    is bounded by `timeout` seconds. Provider errors are returned as
    DispatchFailed; nothing is retried here.
    """

    def __init__(self, client, source: str, timeout: float = 30.0):
        self._client = client
        self.source = source
        self.timeout = timeout

    def request(self, body: str, destination: str) -> DispatchRequest:
        return DispatchRequest(body=body, source=self.source, destination=destination)

    async def dispatch(self, request: DispatchRequest) -> Union[Dispatched, DispatchFailed]:
        try:
            message = await asyncio.wait_for(
                asyncio.to_thread(
                    self._client.messages.create,
                    body=request.body,
                    from_=request.source,
                    to=request.destination,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "dispatch.twilio_timeout: to=%s timeout=%ss",
                request.destination,
                self.timeout,
            )
            return DispatchFailed(detail=f"timed out after {self.timeout}s", timed_out=True)
        except Exception as e:
            logger.error(
                "dispatch.twilio_error: error=%s to=%s",
                str(e),
                request.destination,
            )
            return DispatchFailed(detail=str(e))

        return Dispatched(message_id=getattr(message, "sid", None) or "<no-sid>")
