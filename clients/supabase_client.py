import os
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv
from supabase import create_client, Client
from datetime import datetime, timezone
import logging

load_dotenv()

logger = logging.getLogger(__name__)

_supabase_client: Optional[Client] = None

DOCUMENTS_TABLE = "documents"
CHUNKS_TABLE = "chunks"
LESSONS_TABLE = "lessons"
CARDS_TABLE = "cards"


def get_supabase() -> Client:
    global _supabase_client
    if _supabase_client is None:
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_KEY")
        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")
        _supabase_client = create_client(url, key)
    return _supabase_client


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _first(response) -> Optional[Dict[str, Any]]:
    return response.data[0] if response.data else None


def _insert_one(table: str, row: Dict[str, Any]) -> Dict[str, Any]:
    response = get_supabase().table(table).insert(row).execute()
    if not response.data or "id" not in response.data[0]:
        raise Exception(f"Supabase insert into {table} failed or id not returned: {response}")
    return response.data[0]


def _claim_status(
    table: str,
    row_id: str,
    from_status: str,
    to_status: str,
    stale_before: Optional[datetime] = None,
) -> bool:
    """
    Conditional status transition: only updates the row if it is still in
    `from_status` (and, when `stale_before` is given, its status_updated_at is
    older than that instant). Returns True if this call won the transition.
    """
    query = (
        get_supabase()
        .table(table)
        .update({"status": to_status, "status_updated_at": _now_iso()})
        .eq("id", row_id)
        .eq("status", from_status)
    )
    if stale_before is not None:
        query = query.lt("status_updated_at", stale_before.isoformat())
    response = query.execute()
    return bool(response.data)


# ─── Documents ────────────────────────────────────────────────────────────────

def insert_document(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert a new record into the 'documents' table.
    Returns:
        The inserted row.
    Raises:
        Exception if insertion fails or id is not returned.
    """
    data = {**row, "status_updated_at": _now_iso()}
    return _insert_one(DOCUMENTS_TABLE, data)


def get_document_by_id(document_id: str) -> Optional[Dict[str, Any]]:
    response = get_supabase().table(DOCUMENTS_TABLE).select("*").eq("id", document_id).execute()
    return _first(response)


def update_document_status(document_id: str, status: str) -> None:
    get_supabase().table(DOCUMENTS_TABLE).update({
        "status": status,
        "status_updated_at": _now_iso()
    }).eq("id", document_id).execute()
    logger.info(f"Document {document_id} -> {status}")


def claim_document_status(
    document_id: str,
    from_status: str,
    to_status: str,
    stale_before: Optional[datetime] = None,
) -> bool:
    return _claim_status(DOCUMENTS_TABLE, document_id, from_status, to_status, stale_before)


# ─── Chunks ───────────────────────────────────────────────────────────────────

def insert_chunks(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Batch insert chunk rows. Each row carries document_id, chunk_index and content."""
    if not rows:
        return []
    response = get_supabase().table(CHUNKS_TABLE).insert(rows).execute()
    if not response.data or len(response.data) != len(rows):
        raise Exception(f"Supabase chunk insert returned {len(response.data or [])} of {len(rows)} rows")
    return response.data


def get_chunks_in_range(document_id: str, start_index: int, end_index: int) -> List[Dict[str, Any]]:
    """Chunks with start_index <= chunk_index <= end_index, ascending."""
    response = (
        get_supabase()
        .table(CHUNKS_TABLE)
        .select("*")
        .eq("document_id", document_id)
        .gte("chunk_index", start_index)
        .lte("chunk_index", end_index)
        .order("chunk_index")
        .execute()
    )
    return response.data or []


def delete_chunks_by_document(document_id: str) -> None:
    get_supabase().table(CHUNKS_TABLE).delete().eq("document_id", document_id).execute()


# ─── Lessons ──────────────────────────────────────────────────────────────────

def insert_lesson(row: Dict[str, Any]) -> Dict[str, Any]:
    data = {**row, "status_updated_at": _now_iso()}
    return _insert_one(LESSONS_TABLE, data)


def get_lesson_by_id(lesson_id: str) -> Optional[Dict[str, Any]]:
    response = get_supabase().table(LESSONS_TABLE).select("*").eq("id", lesson_id).execute()
    return _first(response)


def list_lessons_by_document(document_id: str) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(LESSONS_TABLE)
        .select("*")
        .eq("document_id", document_id)
        .order("order_index")
        .execute()
    )
    return response.data or []


def delete_lessons_by_document(document_id: str) -> None:
    get_supabase().table(LESSONS_TABLE).delete().eq("document_id", document_id).execute()


def update_lesson(lesson_id: str, fields: Dict[str, Any]) -> None:
    data = dict(fields)
    if "status" in data:
        data["status_updated_at"] = _now_iso()
    get_supabase().table(LESSONS_TABLE).update(data).eq("id", lesson_id).execute()


def claim_lesson_status(
    lesson_id: str,
    from_status: str,
    to_status: str,
    stale_before: Optional[datetime] = None,
) -> bool:
    return _claim_status(LESSONS_TABLE, lesson_id, from_status, to_status, stale_before)


# ─── Cards ────────────────────────────────────────────────────────────────────

def insert_cards(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Single batch insert of all cards for a lesson."""
    if not rows:
        return []
    response = get_supabase().table(CARDS_TABLE).insert(rows).execute()
    if not response.data:
        raise Exception(f"Supabase card insert failed: {response}")
    return response.data


def list_cards_by_lesson(lesson_id: str) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(CARDS_TABLE)
        .select("*")
        .eq("lesson_id", lesson_id)
        .order("order_index")
        .execute()
    )
    return response.data or []
