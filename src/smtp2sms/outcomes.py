"""Per-submission results.

Every stage of the pipeline returns either its value or one of the `Failure`
subclasses below. Failures are plain values, never raised; the session
handler turns the first one it meets into a single SMTP rejection.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional


class Stage(str, Enum):
    RECEIVING = "receiving"
    PARSING = "parsing"
    EXTRACTING = "extracting"
    NORMALIZING = "normalizing"
    DISPATCHING = "dispatching"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Failure:
    """Base for per-submission failures.

    `reason` is the short text returned to the SMTP client, `detail` is only
    logged.
    """

    reason: ClassVar[str] = "temporary server error"
    code: ClassVar[int] = 451

    detail: str = ""


@dataclass(frozen=True)
class ParseFailure(Failure):
    reason: ClassVar[str] = "failed to parse email"
    code: ClassVar[int] = 554


@dataclass(frozen=True)
class NoRecipient(Failure):
    reason: ClassVar[str] = "no recipient found"
    code: ClassVar[int] = 550


@dataclass(frozen=True)
class EmptyBody(Failure):
    reason: ClassVar[str] = "empty SMS body"
    code: ClassVar[int] = 554


@dataclass(frozen=True)
class NormalizationFailure(Failure):
    reason: ClassVar[str] = "invalid phone number in recipient"
    code: ClassVar[int] = 553

    raw: str = ""


@dataclass(frozen=True)
class DispatchFailed(Failure):
    reason: ClassVar[str] = "failed to send SMS via provider"
    code: ClassVar[int] = 451

    # The provider call may still complete after a timeout
    timed_out: bool = False


@dataclass(frozen=True)
class Dispatched:
    message_id: str


@dataclass(frozen=True)
class SessionOutcome:
    """Final result of one SMTP submission: accepted or rejected, never both."""

    accepted: bool
    stage: Stage
    reason: Optional[str] = None
    code: int = 250
    message_id: Optional[str] = None
    destination: Optional[str] = None
    duplicate: bool = False

    @classmethod
    def accept(cls, destination: Optional[str], message_id: Optional[str], duplicate: bool = False) -> "SessionOutcome":
        return cls(
            accepted=True,
            stage=Stage.COMPLETED,
            message_id=message_id,
            destination=destination,
            duplicate=duplicate,
        )

    @classmethod
    def reject(cls, stage: Stage, failure: Failure) -> "SessionOutcome":
        return cls(accepted=False, stage=stage, reason=failure.reason, code=failure.code)

    def smtp_response(self) -> str:
        if self.accepted:
            return "250 Message accepted (duplicate)" if self.duplicate else "250 Message accepted"
        return f"{self.code} {self.reason}"
