"""Tests for core.permission_gate module."""

import pytest

from core.errors import InvalidTransition
from core.permission_gate import GateOutcome, GateStep, PermissionGate
from core.utils import AcquisitionKind


class TestGateSteps:
    def test_starts_closed(self, fake_source):
        gate = PermissionGate(fake_source)
        assert gate.step == GateStep.CLOSED
        assert gate.kind is None

    def test_open_shows_warning(self, fake_source):
        gate = PermissionGate(fake_source)
        gate.open(AcquisitionKind.CAMERA)
        assert gate.step == GateStep.WARNING_SHOWN
        assert gate.kind == AcquisitionKind.CAMERA

    def test_reopen_restarts_at_warning(self, fake_source):
        gate = PermissionGate(fake_source)
        gate.open(AcquisitionKind.CAMERA)
        gate.accept_warning()
        gate.open(AcquisitionKind.GALLERY)
        assert gate.step == GateStep.WARNING_SHOWN
        assert gate.kind == AcquisitionKind.GALLERY

    def test_cancel_warning_closes(self, fake_source):
        gate = PermissionGate(fake_source)
        gate.open(AcquisitionKind.GALLERY)
        gate.cancel_warning()
        assert gate.step == GateStep.CLOSED
        assert fake_source.acquisitions == []

    def test_allow_requires_accepted_warning(self, fake_source):
        gate = PermissionGate(fake_source)
        with pytest.raises(InvalidTransition):
            gate.allow()
        gate.open(AcquisitionKind.CAMERA)
        with pytest.raises(InvalidTransition):
            gate.allow()
        assert fake_source.acquisitions == []

    def test_accept_warning_twice_rejected(self, fake_source):
        gate = PermissionGate(fake_source)
        gate.open(AcquisitionKind.CAMERA)
        gate.accept_warning()
        with pytest.raises(InvalidTransition):
            gate.accept_warning()


class TestGateOutcomes:
    def _ready(self, source, kind=AcquisitionKind.GALLERY):
        gate = PermissionGate(source)
        gate.open(kind)
        gate.accept_warning()
        return gate

    def test_deny(self, fake_source):
        gate = self._ready(fake_source)
        result = gate.deny()
        assert result.outcome == GateOutcome.DENIED
        assert result.kind == AcquisitionKind.GALLERY
        assert gate.step == GateStep.CLOSED
        assert fake_source.permission_requests == []

    def test_allow_acquires(self, fake_source, leaf_image):
        gate = self._ready(fake_source)
        result = gate.allow()
        assert result.outcome == GateOutcome.ACQUIRED
        assert result.image.path == leaf_image
        assert gate.step == GateStep.CLOSED
        assert fake_source.permission_requests == [AcquisitionKind.GALLERY]
        assert fake_source.acquisitions == [AcquisitionKind.GALLERY]

    def test_platform_denial(self, make_source, leaf_image):
        source = make_source({AcquisitionKind.CAMERA: leaf_image}, permission=False)
        result = self._ready(source, AcquisitionKind.CAMERA).allow()
        assert result.outcome == GateOutcome.DENIED
        assert source.acquisitions == []

    def test_user_cancelled_picker(self, make_source):
        source = make_source({})
        result = self._ready(source).allow()
        assert result.outcome == GateOutcome.CANCELLED
        assert result.image is None

    def test_acquisition_error(self, failing_source):
        result = self._ready(failing_source, AcquisitionKind.CAMERA).allow()
        assert result.outcome == GateOutcome.FAILED
        assert result.error_message == "No camera was found on this device."

    def test_unexpected_error(self, make_source):
        source = make_source(error=RuntimeError("driver crashed"))
        gate = self._ready(source)
        result = gate.allow()
        assert result.outcome == GateOutcome.FAILED
        assert "driver crashed" in result.error_message
        assert gate.step == GateStep.CLOSED

    def test_each_request_needs_its_own_confirmations(self, fake_source):
        gate = self._ready(fake_source)
        gate.allow()
        with pytest.raises(InvalidTransition):
            gate.allow()
        assert len(fake_source.acquisitions) == 1
