import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import requests
from pydantic import ValidationError

from attendance_app.config import DEFAULT_MODEL, DEFAULT_TIMEOUT
from attendance_app.schemas import RecognitionOutcome, RecognitionResponse, Student, Unmatched
from attendance_app.utils.image_utils import split_data_url
from attendance_app.utils.logger import get_logger

logger = get_logger("recognition")

NO_STUDENTS_REASON = "no students registered."
SERVICE_ERROR_REASON = "Error communicating with AI service."

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

TASK_PROMPT = (
    "Task: identify the person in the first image (the 'Target') by comparing it "
    "against the reference photos that follow. Each reference photo belongs to the "
    "student whose ID and name precede it. Answer with the ID of the matching student, "
    "or null if nobody matches, a confidence between 0 and 1, and a short reason."
)

# Gemini's OpenAPI-subset schema for the structured answer
RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "studentId": {
            "type": "STRING",
            "nullable": True,
            "description": "ID of the matched student from the reference list, or null if there is no match.",
        },
        "confidence": {
            "type": "NUMBER",
            "description": "Confidence score from 0 to 1.",
        },
        "reason": {
            "type": "STRING",
            "description": "Brief explanation of the identification.",
        },
    },
    "required": ["studentId", "confidence", "reason"],
}


# -----------------------------
# Recognizer interface
# -----------------------------
class Recognizer(ABC):
    """Identifies which enrolled student (if any) appears in a captured image."""

    @abstractmethod
    def identify(self, image: str, roster: Sequence[Student]) -> RecognitionOutcome:
        """
        image: captured frame as a data URL.
        roster: every enrolled student, each carrying its reference photo.

        Implementations must not raise for service problems; they return
        Unmatched instead.
        """


# -----------------------------
# Gemini
# -----------------------------
def _image_part(data_url: str) -> Dict[str, Any]:
    mime, data = split_data_url(data_url)
    return {"inline_data": {"mime_type": mime, "data": data}}


def build_request(image: str, roster: Sequence[Student]) -> Dict[str, Any]:
    """Builds the generateContent body: prompt, reference list, target image, then every reference photo."""
    references = [{"id": s.id, "name": s.name, "roll": s.roll_number} for s in roster]
    parts: List[Dict[str, Any]] = [
        {"text": TASK_PROMPT},
        {"text": f"Reference Students: {json.dumps(references)}"},
        _image_part(image),
    ]
    for student in roster:
        parts.append({"text": f"Reference for Student ID: {student.id} ({student.name})"})
        parts.append(_image_part(student.photo_url))

    return {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }


def extract_text(body: Dict[str, Any]) -> str:
    """Text of the first candidate. Raises KeyError/IndexError/TypeError on an unexpected shape."""
    parts = body["candidates"][0]["content"]["parts"]
    if not all(isinstance(p, dict) for p in parts):
        raise TypeError(f"unexpected response part in {parts!r}")
    return "".join(p.get("text", "") for p in parts)


class GeminiRecognizer(Recognizer):
    """Delegates face matching to Gemini's generateContent endpoint. No retries."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        base_url: str = GEMINI_BASE_URL,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()
        self.base_url = base_url.rstrip("/")
        if not api_key:
            logger.warning("No API key configured; recognition requests will fail.")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def identify(self, image: str, roster: Sequence[Student]) -> RecognitionOutcome:
        if not roster:
            return Unmatched(reason=NO_STUDENTS_REASON)

        payload = build_request(image, roster)
        logger.info(f"Sending recognition request ({len(roster)} references) to {self.model}")

        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            text = extract_text(response.json())
            result = RecognitionResponse.model_validate_json(text)
        except requests.RequestException as e:
            logger.error(f"Gemini Recognition Error (transport): {e}")
            return Unmatched(reason=SERVICE_ERROR_REASON)
        except ValidationError as e:
            logger.error(f"Gemini Recognition Error (schema mismatch): {e}")
            return Unmatched(reason=SERVICE_ERROR_REASON)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            logger.error(f"Gemini Recognition Error (unexpected response): {e!r}")
            return Unmatched(reason=SERVICE_ERROR_REASON)

        outcome = result.to_outcome({s.id for s in roster})
        logger.info(f"Recognition result: {outcome!r} (reported confidence {result.confidence:.2f})")
        return outcome
