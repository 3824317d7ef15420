from services.card_generator import CardGenerator
from services.document_processor import DocumentProcessor
from services.document_service import DocumentService
from services.lesson_generation import LessonGenerationService
from services.lesson_planner import LessonPlanner

__all__ = [
    'CardGenerator',
    'DocumentProcessor',
    'DocumentService',
    'LessonGenerationService',
    'LessonPlanner'
]
