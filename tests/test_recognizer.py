import json

import pytest
import requests

from attendance_app.face_engine.recognizer import (
    NO_STUDENTS_REASON,
    SERVICE_ERROR_REASON,
    GeminiRecognizer,
    build_request,
)
from attendance_app.schemas import Matched, Student, Unmatched
from tests.conftest import CAPTURED, PHOTO_1

ROSTER = [
    Student(id="s1", name="Ana", roll_number="CS01", photo_url=PHOTO_1),
    Student(id="s2", name="Bruno", roll_number="CS02", photo_url="data:image/png;base64,aW1nMg=="),
]


class FakeResponse:
    def __init__(self, body=None, status_code=200):
        self.body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


def gemini_body(answer):
    text = answer if isinstance(answer, str) else json.dumps(answer)
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def recognizer_for(session):
    return GeminiRecognizer("secret-key", model="test-model", timeout=5, session=session)


def test_request_layout():
    payload = build_request(CAPTURED, ROSTER)
    parts = payload["contents"][0]["parts"]

    assert "Target" in parts[0]["text"]
    references = json.loads(parts[1]["text"].split(": ", 1)[1])
    assert references == [
        {"id": "s1", "name": "Ana", "roll": "CS01"},
        {"id": "s2", "name": "Bruno", "roll": "CS02"},
    ]
    assert parts[2] == {"inline_data": {"mime_type": "image/jpeg", "data": "Y2FwdHVyZWQ="}}
    assert parts[3]["text"] == "Reference for Student ID: s1 (Ana)"
    assert parts[4]["inline_data"]["data"] == "aW1nMQ=="
    assert parts[6]["inline_data"]["mime_type"] == "image/png"
    assert len(parts) == 3 + 2 * len(ROSTER)

    config = payload["generationConfig"]
    assert config["responseMimeType"] == "application/json"
    assert config["responseSchema"]["required"] == ["studentId", "confidence", "reason"]


def test_posts_to_model_endpoint_with_key():
    session = FakeSession(FakeResponse(gemini_body({"studentId": "s1", "confidence": 0.92, "reason": "same face"})))
    recognizer_for(session).identify(CAPTURED, ROSTER)

    sent = session.requests[0]
    assert sent["url"].endswith("/models/test-model:generateContent")
    assert sent["headers"] == {"x-goog-api-key": "secret-key"}
    assert sent["timeout"] == 5


def test_match():
    session = FakeSession(FakeResponse(gemini_body({"studentId": "s1", "confidence": 0.92, "reason": "same face"})))
    assert recognizer_for(session).identify(CAPTURED, ROSTER) == Matched(student_id="s1", confidence=0.92)


def test_null_id_is_unmatched_with_reason():
    session = FakeSession(FakeResponse(gemini_body({"studentId": None, "confidence": 0.1, "reason": "no match"})))
    assert recognizer_for(session).identify(CAPTURED, ROSTER) == Unmatched(reason="no match")


def test_unknown_id_is_unmatched():
    session = FakeSession(FakeResponse(gemini_body({"studentId": "s9", "confidence": 0.8, "reason": "looks like s9"})))
    assert isinstance(recognizer_for(session).identify(CAPTURED, ROSTER), Unmatched)


def test_empty_roster_makes_no_request():
    session = FakeSession()
    assert recognizer_for(session).identify(CAPTURED, []) == Unmatched(reason=NO_STUDENTS_REASON)
    assert session.requests == []


@pytest.mark.parametrize("answer", [
    {"studentId": "s1", "confidence": 0.9, "reason": "x", "extra": True},
    {"studentId": "s1", "confidence": 1.5, "reason": "x"},
    {"studentId": "s1", "reason": "x"},
    "not json at all",
])
def test_nonconforming_answer_is_service_error(answer):
    session = FakeSession(FakeResponse(gemini_body(answer)))
    assert recognizer_for(session).identify(CAPTURED, ROSTER) == Unmatched(reason=SERVICE_ERROR_REASON)


@pytest.mark.parametrize("session", [
    FakeSession(error=requests.Timeout("slow")),
    FakeSession(error=requests.ConnectionError("offline")),
    FakeSession(FakeResponse({"error": {"code": 403}}, status_code=403)),
    FakeSession(FakeResponse({"candidates": []})),
    FakeSession(FakeResponse({"promptFeedback": {"blockReason": "SAFETY"}})),
    FakeSession(FakeResponse({"candidates": [{"content": {"parts": ["oops"]}}]})),
    FakeSession(FakeResponse(["not", "an", "object"])),
    FakeSession(FakeResponse(ValueError("bad json"))),
])
def test_transport_and_shape_failures_are_service_error(session):
    assert recognizer_for(session).identify(CAPTURED, ROSTER) == Unmatched(reason=SERVICE_ERROR_REASON)
