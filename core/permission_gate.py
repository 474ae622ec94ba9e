"""Two-step confirmation (risk warning, then allow/deny) in front of image acquisition."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.acquisition import ImageHandle, ImageSource
from core.errors import AcquisitionError, InvalidTransition
from core.utils import AcquisitionKind

logger = logging.getLogger(__name__)


class GateStep(Enum):
    CLOSED = "closed"
    WARNING_SHOWN = "warning_shown"
    PERMISSION_SHOWN = "permission_shown"


class GateOutcome(Enum):
    ACQUIRED = "acquired"
    CANCELLED = "cancelled"
    DENIED = "denied"
    FAILED = "failed"


@dataclass
class GateResult:
    """What happened when the user answered the permission prompt."""
    outcome: GateOutcome
    kind: AcquisitionKind
    image: Optional[ImageHandle] = None
    error_message: str = ""


class PermissionGate:
    """Sequences warning → permission → acquisition for one request at a time.

    Every open() restarts at the warning step; acquisition only runs from
    allow(), which requires the warning to have been accepted for the same
    request.
    """

    def __init__(self, source: ImageSource):
        self._source = source
        self._step = GateStep.CLOSED
        self._kind: Optional[AcquisitionKind] = None

    @property
    def step(self) -> GateStep:
        return self._step

    @property
    def kind(self) -> Optional[AcquisitionKind]:
        return self._kind

    def open(self, kind: AcquisitionKind):
        """Start a new request with the risk warning."""
        self._step = GateStep.WARNING_SHOWN
        self._kind = kind

    def close(self):
        self._step = GateStep.CLOSED
        self._kind = None

    def cancel_warning(self):
        self._expect(GateStep.WARNING_SHOWN)
        self.close()

    def accept_warning(self):
        self._expect(GateStep.WARNING_SHOWN)
        self._step = GateStep.PERMISSION_SHOWN

    def deny(self) -> GateResult:
        self._expect(GateStep.PERMISSION_SHOWN)
        kind = self._kind
        self.close()
        return GateResult(outcome=GateOutcome.DENIED, kind=kind)

    def allow(self) -> GateResult:
        """Request platform permission and run the acquisition."""
        self._expect(GateStep.PERMISSION_SHOWN)
        kind = self._kind
        self.close()

        try:
            if not self._source.request_permission(kind):
                return GateResult(outcome=GateOutcome.DENIED, kind=kind)
            image = self._source.acquire(kind)
        except AcquisitionError as exc:
            logger.warning("%s acquisition failed: %s", kind.value, exc)
            return GateResult(outcome=GateOutcome.FAILED, kind=kind, error_message=str(exc))
        except Exception as exc:
            logger.exception("Unexpected error during %s acquisition", kind.value)
            return GateResult(outcome=GateOutcome.FAILED, kind=kind, error_message=str(exc))

        if image is None:
            return GateResult(outcome=GateOutcome.CANCELLED, kind=kind)
        return GateResult(outcome=GateOutcome.ACQUIRED, kind=kind, image=image)

    def _expect(self, step: GateStep):
        if self._step != step:
            raise InvalidTransition(
                f"Permission gate is {self._step.value}, expected {step.value}"
            )
