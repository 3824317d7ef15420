"""
Shared fixtures: in-memory stand-ins for the datastore, the object store and
the generative service, wired with the same method names the pipeline uses.
"""

import itertools
import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from cards.registry import build_default_registry
from clients.gemini_client import MultimodalResponse
from utils.exceptions import StorageError

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16

# Prompt markers -> kind, used by the scripted responder
TEXT_CARD = "explanatory card"
MC_QUESTION = "multiple choice question"
FILL_IN_BLANK = "fill-in-the-blank exercise"
INFOGRAPHIC = "designing an educational infographic"
INTERACTIVE_VISUAL = "building an interactive visualization"
ORAL_EXAM = "short spoken exam"
PLANNER = "planning the cards of one bite-sized lesson"
SEGMENTATION = "sequence of bite-sized lessons"

CARD_RESPONSES = {
    TEXT_CARD: json.dumps({"title": "Photosynthesis", "body": "Plants turn **light** into sugar."}),
    MC_QUESTION: json.dumps({
        "question": "What do plants produce?",
        "options": ["Sugar", "Salt", "Iron", "Sand"],
        "correct_index": 0,
        "explanation": "Glucose is the product.",
    }),
    FILL_IN_BLANK: json.dumps({
        "text": "Plants absorb {{blank1}}.",
        "blanks": {"blank1": [{"text": "light", "is_correct": True}, {"text": "sound", "is_correct": False}]},
        "explanation": "Light drives photosynthesis.",
    }),
    INFOGRAPHIC: json.dumps({
        "title": "Leaf Factory",
        "image_prompt": "A leaf as a factory",
        "description": "Inputs and outputs of photosynthesis",
        "caption": "Light in, sugar out",
    }),
    INTERACTIVE_VISUAL: json.dumps({
        "title": "Sunlight Slider",
        "html": "<!DOCTYPE html><html><body>slider</body></html>",
        "description": "Drag to change light",
    }),
    ORAL_EXAM: json.dumps({"topic": "Photosynthesis", "context": "Light, water, CO2 make glucose.", "question_count": 4}),
}

Response = Union[str, Exception, Callable[[str], str]]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FakeGenerativeClient:
    """
    Scripted generative service. `responses` maps a prompt substring to the
    text to return, an exception to raise, or a callable taking the prompt.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Response]] = None,
        default: str = "this is not json",
        extraction_text: str = "[]",
        image: Optional[bytes] = PNG_BYTES,
    ):
        self.responses = dict(CARD_RESPONSES)
        self.responses.update(responses or {})
        self.default = default
        self.extraction_text = extraction_text
        self.image = image
        self.text_calls: List[tuple] = []
        self.multimodal_calls: List[dict] = []

    def _respond(self, prompt: str) -> str:
        for marker, response in self.responses.items():
            if marker in prompt:
                if isinstance(response, Exception):
                    raise response
                if callable(response):
                    return response(prompt)
                return response
        return self.default

    async def generate_text(self, prompt: str, role=None) -> str:
        self.text_calls.append((prompt, role))
        return self._respond(prompt)

    async def generate_multimodal(self, prompt: str, role=None, attachment=None, want_image: bool = False):
        self.multimodal_calls.append({"prompt": prompt, "role": role, "attachment": attachment, "want_image": want_image})
        if want_image:
            if isinstance(self.image, Exception):
                raise self.image
            return MultimodalResponse(text="", asset=self.image, asset_mime_type="image/png" if self.image else None)
        if isinstance(self.extraction_text, Exception):
            raise self.extraction_text
        return MultimodalResponse(text=self.extraction_text)


class FakeObjectStore:
    def __init__(self, fail_uploads: bool = False):
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.fail_uploads = fail_uploads

    async def upload(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> bool:
        if self.fail_uploads:
            return False
        self.objects[key] = data
        self.content_types[key] = content_type
        return True

    async def download(self, key: str) -> bytes:
        if key not in self.objects:
            raise StorageError(f"Failed to download {key}", error_code="DOWNLOAD_FAILED")
        return self.objects[key]

    async def create_signed_url(self, key: str, expires_in: int) -> str:
        return f"https://signed.example/{key}?expires={expires_in}"


class InMemoryDatastore:
    def __init__(self):
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.chunks: List[Dict[str, Any]] = []
        self.lessons: Dict[str, Dict[str, Any]] = {}
        self.cards: List[Dict[str, Any]] = []
        self._ids = itertools.count(1)

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"


_claim_lock = threading.Lock()


def _claim(row: Optional[Dict[str, Any]], from_status: str, to_status: str, stale_before=None) -> bool:
    """Conditional status update, atomic like the datastore's filtered UPDATE."""
    with _claim_lock:
        if not row or row["status"] != from_status:
            return False
        if stale_before is not None and datetime.fromisoformat(row["status_updated_at"]) >= stale_before:
            return False
        row["status"] = to_status
        row["status_updated_at"] = _now().isoformat()
        return True


class FakeDocumentStorage:
    def __init__(self, db: InMemoryDatastore):
        self.db = db

    def create(self, row):
        doc = {"status": "pending", **row, "status_updated_at": _now().isoformat()}
        doc.setdefault("id", self.db.next_id("doc"))
        self.db.documents[doc["id"]] = doc
        return dict(doc)

    def get(self, document_id):
        row = self.db.documents.get(document_id)
        return dict(row) if row else None

    def set_status(self, document_id, status):
        row = self.db.documents[document_id]
        row["status"] = status
        row["status_updated_at"] = _now().isoformat()

    def claim(self, document_id, from_status, to_status, stale_before=None):
        return _claim(self.db.documents.get(document_id), from_status, to_status, stale_before)


class FakeChunkStorage:
    def __init__(self, db: InMemoryDatastore):
        self.db = db

    def insert_many(self, rows):
        for row in rows:
            self.db.chunks.append({"id": self.db.next_id("chunk"), **row})
        return len(rows)

    def get_range(self, document_id, start_index, end_index):
        rows = [
            row for row in self.db.chunks
            if row["document_id"] == document_id and start_index <= row["chunk_index"] <= end_index
        ]
        return sorted(rows, key=lambda row: row["chunk_index"])

    def delete_for_document(self, document_id):
        self.db.chunks[:] = [row for row in self.db.chunks if row["document_id"] != document_id]


class FakeLessonStorage:
    def __init__(self, db: InMemoryDatastore):
        self.db = db

    def create(self, row):
        lesson = {**row, "id": self.db.next_id("lesson"), "status_updated_at": _now().isoformat()}
        self.db.lessons[lesson["id"]] = lesson
        return dict(lesson)

    def get(self, lesson_id):
        row = self.db.lessons.get(lesson_id)
        return dict(row) if row else None

    def list_for_document(self, document_id):
        rows = [row for row in self.db.lessons.values() if row["document_id"] == document_id]
        return [dict(row) for row in sorted(rows, key=lambda row: row["order_index"])]

    def delete_for_document(self, document_id):
        for lesson_id in [key for key, row in self.db.lessons.items() if row["document_id"] == document_id]:
            del self.db.lessons[lesson_id]

    def update(self, lesson_id, fields):
        row = self.db.lessons[lesson_id]
        row.update(fields)
        if "status" in fields:
            row["status_updated_at"] = _now().isoformat()

    def set_status(self, lesson_id, status):
        self.update(lesson_id, {"status": status})

    def claim(self, lesson_id, from_status, to_status, stale_before=None):
        return _claim(self.db.lessons.get(lesson_id), from_status, to_status, stale_before)


class FakeCardStorage:
    def __init__(self, db: InMemoryDatastore, fail: bool = False):
        self.db = db
        self.fail = fail
        self.insert_calls = 0

    def insert_many(self, rows):
        self.insert_calls += 1
        if self.fail:
            raise StorageError("Failed storing cards")
        stored = [{"id": self.db.next_id("card"), **row} for row in rows]
        self.db.cards.extend(stored)
        return stored

    def list_for_lesson(self, lesson_id):
        rows = [row for row in self.db.cards if row["lesson_id"] == lesson_id]
        return sorted(rows, key=lambda row: row["order_index"])


@pytest.fixture
def db():
    return InMemoryDatastore()


@pytest.fixture
def client():
    return FakeGenerativeClient()


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def document_storage(db):
    return FakeDocumentStorage(db)


@pytest.fixture
def chunk_storage(db):
    return FakeChunkStorage(db)


@pytest.fixture
def lesson_storage(db):
    return FakeLessonStorage(db)


@pytest.fixture
def card_storage(db):
    return FakeCardStorage(db)


def seed_lesson(db: InMemoryDatastore, pages: List[str], status: str = "pending", **overrides) -> Dict[str, Any]:
    """Insert a document, its chunks and one lesson spanning all of them."""
    document_id = db.next_id("doc")
    db.documents[document_id] = {
        "id": document_id, "name": "notes.pdf", "path": f"documents/{document_id}/notes.pdf",
        "size": 10, "mime_type": "application/pdf", "status": "completed",
        "status_updated_at": _now().isoformat(),
    }
    for index, page in enumerate(pages):
        db.chunks.append({"id": db.next_id("chunk"), "document_id": document_id, "chunk_index": index, "content": page})
    lesson = {
        "id": db.next_id("lesson"), "document_id": document_id, "title": "Photosynthesis",
        "description": "How plants make food", "order_index": 0,
        "start_chunk_index": 0, "end_chunk_index": max(len(pages) - 1, 0),
        "prev_lesson_id": None, "status": status, "status_updated_at": _now().isoformat(),
        "is_completed": False, "best_score": None,
    }
    lesson.update(overrides)
    db.lessons[lesson["id"]] = lesson
    return lesson
