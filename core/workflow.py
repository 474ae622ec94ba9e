"""Workflow controller: acquire → analyze → save state machine for one detection screen.

The controller owns the acquired ImageHandle and sequences the permission
gate, the detector and the history recorder. Long-running work (detection,
save) is split into begin/complete pairs so the host can run it on a worker
thread; every begin hands out a ticket, and a completion whose ticket is no
longer the active one is ignored. Each acquisition request starts a new
generation, which is how responses for an abandoned image are recognised.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, ClassVar, Optional, Union

from core.acquisition import ImageHandle
from core.detection import Detector, detect_with_timeout
from core.errors import (
    DetectionCancelled,
    DetectionError,
    DetectionTimeout,
    IdentityRequired,
    InvalidTransition,
)
from core.history_recorder import HistoryRecorder
from core.permission_gate import GateOutcome, PermissionGate
from core.utils import (
    AcquisitionKind,
    CancelCheck,
    DetectionResult,
    HistoryRecord,
    IdentityProvider,
    OperationResult,
)

logger = logging.getLogger(__name__)


class WorkflowPhase(Enum):
    IDLE = "idle"
    WARNING_PENDING = "warning_pending"
    PERMISSION_PENDING = "permission_pending"
    ACQUIRED = "acquired"
    ANALYZING = "analyzing"
    RESULTED = "resulted"
    SAVED = "saved"


# --- Tickets ---

@dataclass(frozen=True)
class DetectionTicket:
    """Identifies one detection request; completions must present it back."""
    generation: int
    sequence: int
    image: ImageHandle


@dataclass(frozen=True)
class SaveTicket:
    generation: int
    sequence: int
    user_id: str
    result: DetectionResult


# --- States ---

@dataclass(frozen=True)
class Idle:
    phase: ClassVar[WorkflowPhase] = WorkflowPhase.IDLE


@dataclass(frozen=True)
class WarningPending:
    kind: AcquisitionKind
    generation: int
    phase: ClassVar[WorkflowPhase] = WorkflowPhase.WARNING_PENDING


@dataclass(frozen=True)
class PermissionPending:
    kind: AcquisitionKind
    generation: int
    phase: ClassVar[WorkflowPhase] = WorkflowPhase.PERMISSION_PENDING


@dataclass(frozen=True)
class Acquired:
    image: ImageHandle
    generation: int
    phase: ClassVar[WorkflowPhase] = WorkflowPhase.ACQUIRED


@dataclass(frozen=True)
class Analyzing:
    image: ImageHandle
    generation: int
    ticket: DetectionTicket
    phase: ClassVar[WorkflowPhase] = WorkflowPhase.ANALYZING


@dataclass(frozen=True)
class Resulted:
    image: ImageHandle
    generation: int
    result: DetectionResult
    save_ticket: Optional[SaveTicket] = None
    phase: ClassVar[WorkflowPhase] = WorkflowPhase.RESULTED

    @property
    def saving(self) -> bool:
        return self.save_ticket is not None


@dataclass(frozen=True)
class Saved:
    image: ImageHandle
    generation: int
    result: DetectionResult
    record: Optional[HistoryRecord] = None
    phase: ClassVar[WorkflowPhase] = WorkflowPhase.SAVED


WorkflowState = Union[Idle, WarningPending, PermissionPending, Acquired, Analyzing, Resulted, Saved]


# --- Notices ---

class NoticeKind(Enum):
    PERMISSION_DENIED = "permission_denied"
    ACQUISITION_FAILED = "acquisition_failed"
    DETECTION_FAILED = "detection_failed"
    SAVE_FAILED = "save_failed"
    IDENTITY_REQUIRED = "identity_required"
    DETECTION_COMPLETE = "detection_complete"
    SAVED = "saved"


_INFO_NOTICES = {NoticeKind.DETECTION_COMPLETE, NoticeKind.SAVED}


@dataclass(frozen=True)
class Notice:
    """A user-visible message raised by a transition."""
    kind: NoticeKind
    message: str

    @property
    def is_error(self) -> bool:
        return self.kind not in _INFO_NOTICES


class WorkflowController:
    """State machine for the capture → permission → detect → save flow.

    Args:
        gate: Permission gate wrapping the image source.
        identity: Returns the signed-in user id, or None for guests.
        translate: Message lookup, ``translate(key, **kwargs)``. Defaults to i18n.t.
        on_state_changed: Called with the new state after every transition.
        on_notice: Called with each Notice.
    """

    def __init__(
        self,
        gate: PermissionGate,
        identity: IdentityProvider,
        translate: Optional[Callable[..., str]] = None,
        on_state_changed: Optional[Callable[[WorkflowState], None]] = None,
        on_notice: Optional[Callable[[Notice], None]] = None,
    ):
        self._gate = gate
        self._identity = identity
        self._translate = translate
        self._on_state_changed = on_state_changed
        self._on_notice = on_notice
        self._state: WorkflowState = Idle()
        self._generation = 0
        self._sequence = 0

    # --- Introspection ---

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def phase(self) -> WorkflowPhase:
        return self._state.phase

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def image(self) -> Optional[ImageHandle]:
        """The image held by the current state, if any."""
        return getattr(self._state, "image", None)

    @property
    def can_save(self) -> bool:
        """Save is offered only for an unsaved result while someone is signed in."""
        state = self._state
        return isinstance(state, Resulted) and not state.saving and bool(self._identity())

    # --- Acquisition ---

    def request_acquisition(self, kind: AcquisitionKind) -> WorkflowState:
        """Start a new request for a camera or gallery image.

        Allowed from any state. The held image is released and any in-flight
        detection or save becomes stale.
        """
        self._release_image()
        self._generation += 1
        self._gate.open(kind)
        return self._set_state(WarningPending(kind=kind, generation=self._generation))

    def cancel_warning(self) -> WorkflowState:
        self._expect(WarningPending)
        self._gate.cancel_warning()
        return self._set_state(Idle())

    def continue_warning(self) -> WorkflowState:
        state = self._expect(WarningPending)
        self._gate.accept_warning()
        return self._set_state(PermissionPending(kind=state.kind, generation=state.generation))

    def deny_permission(self) -> WorkflowState:
        self._expect(PermissionPending)
        self._gate.deny()
        self._set_state(Idle())
        self._notify(NoticeKind.PERMISSION_DENIED, self._t("notice.permission_denied"))
        return self._state

    def allow_permission(self) -> WorkflowState:
        """Ask the platform for access and acquire the image."""
        state = self._expect(PermissionPending)
        outcome = self._gate.allow()

        if self._generation != state.generation:
            # A newer request started while the source was open
            if outcome.image is not None:
                outcome.image.release()
            logger.debug("Dropping acquisition for stale generation %d", state.generation)
            return self._state

        if outcome.outcome == GateOutcome.ACQUIRED:
            return self._set_state(Acquired(image=outcome.image, generation=state.generation))

        self._set_state(Idle())
        if outcome.outcome == GateOutcome.DENIED:
            self._notify(NoticeKind.PERMISSION_DENIED, self._t("notice.permission_denied"))
        elif outcome.outcome == GateOutcome.FAILED:
            self._notify(
                NoticeKind.ACQUISITION_FAILED,
                self._t("notice.acquisition_failed", error=outcome.error_message),
            )
        return self._state

    # --- Detection ---

    def begin_detection(self) -> DetectionTicket:
        """Move Acquired → Analyzing. Only one detection may be in flight."""
        state = self._expect(Acquired)
        self._sequence += 1
        ticket = DetectionTicket(
            generation=state.generation, sequence=self._sequence, image=state.image
        )
        self._set_state(Analyzing(image=state.image, generation=state.generation, ticket=ticket))
        return ticket

    def complete_detection(self, ticket: DetectionTicket, result: DetectionResult) -> bool:
        """Apply a detection result. Returns False if the ticket is stale."""
        if not self._is_active_detection(ticket):
            logger.debug("Discarding stale detection result (generation %d)", ticket.generation)
            return False
        state = self._state
        self._set_state(Resulted(image=state.image, generation=state.generation, result=result))
        self._notify(
            NoticeKind.DETECTION_COMPLETE,
            self._t("notice.detection_complete", disease=result.disease_name),
        )
        return True

    def fail_detection(self, ticket: DetectionTicket, error: Exception) -> bool:
        """Return to Acquired so detection can be retried. False if stale."""
        if not self._is_active_detection(ticket):
            logger.debug("Discarding stale detection failure (generation %d): %s",
                         ticket.generation, error)
            return False
        state = self._state
        self._set_state(Acquired(image=state.image, generation=state.generation))
        if isinstance(error, DetectionCancelled):
            return True
        if isinstance(error, DetectionTimeout):
            message = self._t("notice.detection_timeout")
        else:
            message = self._t("notice.detection_failed", error=str(error))
        logger.warning("Detection failed: %s", error)
        self._notify(NoticeKind.DETECTION_FAILED, message)
        return True

    def cancel_detection(self) -> WorkflowState:
        """Abandon the in-flight detection and keep the image."""
        state = self._expect(Analyzing)
        return self._set_state(Acquired(image=state.image, generation=state.generation))

    # --- Saving ---

    def begin_save(self) -> SaveTicket:
        """Mark the result as saving and hand out the ticket for the backend call.

        Raises:
            IdentityRequired: no user is signed in. State is unchanged.
            InvalidTransition: not in Resulted, or a save is already running.
        """
        state = self._expect(Resulted)
        if state.saving:
            raise InvalidTransition("A save is already in progress")

        user_id = self._identity()
        if not user_id:
            self._notify(NoticeKind.IDENTITY_REQUIRED, self._t("notice.identity_required"))
            raise IdentityRequired("Sign in to save results to history")

        self._sequence += 1
        ticket = SaveTicket(
            generation=state.generation,
            sequence=self._sequence,
            user_id=user_id,
            result=state.result,
        )
        self._set_state(replace(state, save_ticket=ticket))
        return ticket

    def complete_save(self, ticket: SaveTicket, outcome: OperationResult) -> bool:
        """Apply the backend's answer to a save. Returns False if stale."""
        state = self._state
        if not (
            isinstance(state, Resulted)
            and state.save_ticket is not None
            and state.save_ticket.sequence == ticket.sequence
        ):
            logger.debug("Discarding stale save response (generation %d)", ticket.generation)
            return False

        if outcome.success:
            self._set_state(Saved(
                image=state.image,
                generation=state.generation,
                result=state.result,
                record=outcome.record,
            ))
            self._notify(NoticeKind.SAVED, self._t("notice.saved"))
        else:
            self._set_state(replace(state, save_ticket=None))
            logger.error("Saving detection failed: %s", outcome.error_message)
            self._notify(
                NoticeKind.SAVE_FAILED,
                self._t("notice.save_failed", error=outcome.error_message),
            )
        return True

    # --- Reset ---

    def discard(self) -> WorkflowState:
        """Drop whatever is in progress and return to Idle ("analyze another")."""
        if isinstance(self._state, (WarningPending, PermissionPending)):
            self._gate.close()
        self._release_image()
        self._generation += 1
        return self._set_state(Idle())

    # --- Synchronous drivers ---

    def run_detection(
        self,
        detector: Detector,
        timeout_s: float,
        is_cancelled: Optional[CancelCheck] = None,
    ) -> WorkflowState:
        """Run begin/complete detection inline, translating detector errors."""
        ticket = self.begin_detection()
        try:
            result = detect_with_timeout(detector, ticket.image, timeout_s, is_cancelled)
        except DetectionError as exc:
            self.fail_detection(ticket, exc)
        except Exception as exc:
            logger.exception("Unexpected detector error")
            self.fail_detection(ticket, DetectionError(str(exc)))
        else:
            self.complete_detection(ticket, result)
        return self._state

    def run_save(self, recorder: HistoryRecorder) -> WorkflowState:
        """Run begin/complete save inline, translating recorder errors."""
        ticket = self.begin_save()
        try:
            outcome = recorder.save(ticket.user_id, ticket.result)
        except Exception as exc:
            logger.exception("Unexpected history recorder error")
            outcome = OperationResult.failed(str(exc))
        self.complete_save(ticket, outcome)
        return self._state

    # --- Internals ---

    def _is_active_detection(self, ticket: DetectionTicket) -> bool:
        state = self._state
        return isinstance(state, Analyzing) and state.ticket.sequence == ticket.sequence

    def _expect(self, state_type):
        if not isinstance(self._state, state_type):
            raise InvalidTransition(
                f"Cannot do that while {self._state.phase.value}; "
                f"expected {state_type.phase.value}"
            )
        return self._state

    def _release_image(self):
        image = self.image
        if image is not None:
            image.release()

    def _set_state(self, state: WorkflowState) -> WorkflowState:
        logger.debug("Workflow %s -> %s", self._state.phase.value, state.phase.value)
        self._state = state
        if self._on_state_changed:
            self._on_state_changed(state)
        return state

    def _notify(self, kind: NoticeKind, message: str):
        if self._on_notice:
            self._on_notice(Notice(kind=kind, message=message))

    def _t(self, key: str, **kwargs) -> str:
        if self._translate is None:
            from i18n import t
            self._translate = t
        return self._translate(key, **kwargs)
