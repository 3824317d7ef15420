"""
Pydantic models for documents, lessons and cards.
Transient planning structures (PlannedCard, LessonPlan, GenerationResult) are never persisted.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Dict, Any
from enum import Enum


class DocumentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class LessonStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    READY = "ready"


# Persisted entities
class Document(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    path: str
    size: int = 0
    mime_type: str = "application/pdf"
    status: DocumentStatus = DocumentStatus.PENDING
    status_updated_at: Optional[str] = None


class Chunk(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    document_id: str
    chunk_index: int = Field(..., ge=0)
    content: str


class Lesson(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    document_id: str
    title: str
    description: str = ""
    order_index: int
    start_chunk_index: int
    end_chunk_index: int
    prev_lesson_id: Optional[str] = None
    status: LessonStatus = LessonStatus.PENDING
    status_updated_at: Optional[str] = None
    is_completed: bool = False
    best_score: Optional[float] = None

    @field_validator("description", mode="before")
    @classmethod
    def _null_description(cls, value):
        return "" if value is None else value


class Card(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    lesson_id: str
    order_index: int
    type: str
    content: Dict[str, Any]
    image_url: Optional[str] = None


# Transient planning / generation structures
class PlannedCard(BaseModel):
    kind: str
    focus: str


class LessonPlan(BaseModel):
    cards: List[PlannedCard]
    used_default: bool = False

    def kinds(self) -> List[str]:
        return [card.kind for card in self.cards]

    def __len__(self) -> int:
        return len(self.cards)


class GeneratedCard(BaseModel):
    type: str
    content: Dict[str, Any]


class CardError(BaseModel):
    index: int
    error: str


class GenerationResult(BaseModel):
    cards: List[GeneratedCard] = Field(default_factory=list)
    errors: List[CardError] = Field(default_factory=list)


class LessonSegment(BaseModel):
    """One lesson proposed by segmentation, before ranges are assigned."""
    title: str
    description: str = ""


class ChunkRange(BaseModel):
    start_chunk_index: int
    end_chunk_index: int


# Request / response models
class CompleteLessonRequest(BaseModel):
    score: float


class ProcessDocumentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    cached: Optional[bool] = None
    in_progress: Optional[bool] = Field(None, alias="inProgress")
    lessons_created: Optional[int] = Field(None, alias="lessonsCreated")
    error: Optional[str] = None


class GenerateLessonResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    cards_generated: Optional[int] = Field(None, alias="cardsGenerated")
    cached: Optional[bool] = None
    in_progress: Optional[bool] = Field(None, alias="inProgress")
    errors: Optional[List[CardError]] = None


class CompleteLessonResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    passed: bool
    score: float
    new_best_score: bool = Field(..., alias="newBestScore")


class UploadDocumentResponse(BaseModel):
    id: str
    name: str
    status: DocumentStatus
