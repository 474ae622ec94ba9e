"""Maize leaf disease detection.

`Detector` is the seam for inference backends. `MockDetector` returns one of
four canned diagnoses after an artificial delay; `RemoteDetector` posts the
image to an HTTP inference service. Both take an image handle and return a
DetectionResult, and are called off the UI thread one request at a time.
"""

import logging
import random
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import requests

from core.acquisition import ImageHandle
from core.errors import DetectionCancelled, DetectionError, DetectionTimeout
from core.utils import (
    CancelCheck,
    DetectionResult,
    Severity,
    TreatmentSuggestion,
    parse_severity,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

HEALTHY_LABEL = "Healthy Leaf"


@dataclass(frozen=True)
class CannedOutcome:
    """A fixed diagnosis the mock detector can return."""
    disease_name: str
    description: str
    severity: Severity
    base_confidence: float
    confidence_spread: float
    suggestions: Tuple[TreatmentSuggestion, ...] = ()


CANNED_OUTCOMES: Tuple[CannedOutcome, ...] = (
    CannedOutcome(
        disease_name="Northern Corn Leaf Blight",
        description=(
            "A fungal disease causing cigar-shaped lesions on leaves, "
            "reducing photosynthesis and yield."
        ),
        severity=Severity.MODERATE,
        base_confidence=87,
        confidence_spread=10,
        suggestions=(
            TreatmentSuggestion(
                name="Azoxystrobin",
                description="Broad-spectrum fungicide effective against Northern Corn Leaf Blight",
                application_instructions=(
                    "Apply as foliar spray when disease first appears. "
                    "Repeat every 14 days if needed."
                ),
                safety_note="Always follow label instructions and local regulations.",
            ),
            TreatmentSuggestion(
                name="Propiconazole",
                description="Systemic fungicide for preventive and curative control",
                application_instructions=(
                    "Mix 250ml per hectare in water. Apply during early growth stages."
                ),
                safety_note="Wear protective equipment during application.",
            ),
        ),
    ),
    CannedOutcome(
        disease_name="Common Rust",
        description=(
            "Fungal disease characterized by small, circular to elongate "
            "pustules on both leaf surfaces."
        ),
        severity=Severity.MILD,
        base_confidence=82,
        confidence_spread=10,
        suggestions=(
            TreatmentSuggestion(
                name="Mancozeb",
                description="Protective fungicide for rust control",
                application_instructions=(
                    "Apply as foliar spray at first sign of disease. Reapply every 7-10 days."
                ),
                safety_note="Do not apply within 14 days of harvest.",
            ),
        ),
    ),
    CannedOutcome(
        disease_name="Gray Leaf Spot",
        description=(
            "Severe fungal disease causing rectangular lesions between leaf veins, "
            "leading to premature leaf death."
        ),
        severity=Severity.SEVERE,
        base_confidence=91,
        confidence_spread=8,
        suggestions=(
            TreatmentSuggestion(
                name="Pyraclostrobin + Metconazole",
                description="Combination fungicide for effective Gray Leaf Spot control",
                application_instructions=(
                    "Apply 400ml per hectare. Start applications at first disease symptoms."
                ),
                safety_note=(
                    "Follow resistance management practices. "
                    "Rotate with different mode of action fungicides."
                ),
            ),
            TreatmentSuggestion(
                name="Trifloxystrobin",
                description="Strobilurin fungicide with protective and curative activity",
                application_instructions=(
                    "Apply as foliar spray. Use 300ml per hectare in adequate water volume."
                ),
                safety_note="Always consult local agricultural extension for expert advice.",
            ),
        ),
    ),
    CannedOutcome(
        disease_name=HEALTHY_LABEL,
        description=(
            "No disease symptoms detected. Continue regular monitoring and "
            "maintain adequate watering and nutrition."
        ),
        severity=Severity.MILD,
        base_confidence=92,
        confidence_spread=7,
    ),
)


class Detector:
    """Strategy interface for producing a DetectionResult from an image."""

    def detect(self, image: ImageHandle, is_cancelled: Optional[CancelCheck] = None) -> DetectionResult:
        raise NotImplementedError


class MockDetector(Detector):
    """Simulated detector: fixed delay, then a random canned diagnosis."""

    POLL_INTERVAL_S = 0.02

    def __init__(self, delay_s: float = 2.0, rng: Optional[random.Random] = None):
        self._delay_s = delay_s
        self._rng = rng or random.Random()

    def detect(self, image: ImageHandle, is_cancelled: Optional[CancelCheck] = None) -> DetectionResult:
        deadline = time.monotonic() + self._delay_s
        while True:
            if is_cancelled and is_cancelled():
                raise DetectionCancelled("Detection cancelled.")
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            time.sleep(min(self.POLL_INTERVAL_S, remaining))

        outcome = self._rng.choice(CANNED_OUTCOMES)
        confidence = outcome.base_confidence + self._rng.random() * outcome.confidence_spread
        return DetectionResult(
            identifier=f"detection-{uuid.uuid4().hex[:12]}",
            disease_name=outcome.disease_name,
            description=outcome.description,
            confidence_level=max(0, min(100, int(round(confidence)))),
            severity=outcome.severity,
            suggestions=outcome.suggestions,
            source_image_reference=image.path,
            timestamp=utc_now_iso(),
        )


class RemoteDetector(Detector):
    """Posts the image to an HTTP inference endpoint.

    The endpoint receives a multipart field named ``image`` and answers with
    JSON in the same shape as DetectionResult (camelCase or snake_case keys).
    """

    def __init__(self, endpoint: str, timeout_s: float = 30.0, session: Optional[requests.Session] = None):
        if not endpoint:
            raise ValueError("Inference endpoint is required.")
        self._endpoint = endpoint
        self._timeout_s = timeout_s
        self._session = session or requests.Session()

    def detect(self, image: ImageHandle, is_cancelled: Optional[CancelCheck] = None) -> DetectionResult:
        try:
            data = image.read_bytes()
        except OSError as exc:
            raise DetectionError(f"Could not read image: {exc}") from exc

        if is_cancelled and is_cancelled():
            raise DetectionCancelled("Detection cancelled.")

        try:
            response = self._session.post(
                self._endpoint,
                files={"image": (image.filename, data, image.mime_type)},
                timeout=self._timeout_s,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as exc:
            raise DetectionTimeout(f"Inference service did not answer within {self._timeout_s:g}s") from exc
        except requests.RequestException as exc:
            raise DetectionError(f"Inference request failed: {exc}") from exc
        except ValueError as exc:
            raise DetectionError("Inference service returned invalid JSON") from exc

        if is_cancelled and is_cancelled():
            raise DetectionCancelled("Detection cancelled.")
        return parse_detection_payload(payload, image.path)


def _pick(data: Dict[str, Any], *keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def parse_detection_payload(payload: Any, image_reference: str = "") -> DetectionResult:
    """Map an inference service JSON body to a DetectionResult."""
    if not isinstance(payload, dict):
        raise DetectionError("Inference response must be a JSON object")

    try:
        name = _pick(payload, "diseaseName", "disease_name")
        if not name:
            raise DetectionError("Inference response has no disease name")
        confidence = float(_pick(payload, "confidence", "confidenceLevel", "confidence_level"))
        suggestions = tuple(
            TreatmentSuggestion(
                name=str(_pick(item, "name", default="")),
                description=str(_pick(item, "description", default="")),
                application_instructions=str(
                    _pick(item, "application", "applicationInstructions",
                          "application_instructions", default="")
                ),
                safety_note=str(_pick(item, "safetyNote", "safety_note", default="")),
            )
            for item in _pick(payload, "suggestions", default=[])
        )
        return DetectionResult(
            identifier=str(_pick(payload, "id", "identifier", default=f"detection-{uuid.uuid4().hex[:12]}")),
            disease_name=str(name),
            description=str(_pick(payload, "description", default="")),
            confidence_level=int(round(confidence)),
            severity=parse_severity(_pick(payload, "severity")),
            suggestions=suggestions,
            source_image_reference=str(_pick(payload, "imageUrl", "image_url", default=image_reference)),
            timestamp=str(_pick(payload, "detectedAt", "detected_at", "timestamp", default=utc_now_iso())),
        )
    except DetectionError:
        raise
    except (TypeError, ValueError, AttributeError, OverflowError) as exc:
        raise DetectionError(f"Malformed inference response: {exc}") from exc


def detect_with_timeout(
    detector: Detector,
    image: ImageHandle,
    timeout_s: float,
    is_cancelled: Optional[CancelCheck] = None,
) -> DetectionResult:
    """Run detector.detect with a deadline; expiry raises DetectionTimeout.

    A result that arrives after the deadline is also treated as a timeout.
    Cancellation by the caller still raises DetectionCancelled.
    """
    deadline = time.monotonic() + timeout_s

    def expired() -> bool:
        return time.monotonic() >= deadline

    def should_stop() -> bool:
        return bool(is_cancelled and is_cancelled()) or expired()

    try:
        result = detector.detect(image, is_cancelled=should_stop)
    except DetectionCancelled:
        if is_cancelled and is_cancelled():
            raise
        if expired():
            raise DetectionTimeout(f"Detection timed out after {timeout_s:g}s")
        raise

    if expired():
        raise DetectionTimeout(f"Detection timed out after {timeout_s:g}s")
    return result


def create_detector(config) -> Detector:
    """Build the detector selected by the application config."""
    if config.detector == "remote":
        logger.info("Using remote detector at %s", config.inference_url)
        return RemoteDetector(config.inference_url, timeout_s=config.detection_timeout_s)
    return MockDetector(delay_s=config.mock_delay_s)
