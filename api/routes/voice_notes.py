"""
Voice note API endpoints for Relationship OS.

Upload, list, play back and delete recorded audio about a person.
"""
from pathlib import Path
from typing import Optional
import logging

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse

from api.services.person_store import get_person_store
from api.services.voice_notes import get_voice_note_store, is_audio_mime_type

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["voice-notes"])


@router.post("/people/{person_id}/voice-notes", status_code=201)
async def upload_voice_note(
    person_id: str,
    file: UploadFile = File(...),
    duration_seconds: Optional[int] = Query(None, ge=0, description="Recording length in seconds"),
):
    """
    Upload a voice note about a person.

    Accepts any audio/* content type; the browser recorder sends audio/webm.
    """
    if not get_person_store().get_by_id(person_id):
        raise HTTPException(status_code=404, detail=f"Person '{person_id}' not found")
    if not is_audio_mime_type(file.content_type):
        raise HTTPException(status_code=400, detail=f"Expected an audio upload, got {file.content_type}")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Voice note is empty")

    note = get_voice_note_store().save(
        person_id,
        content,
        mime_type=file.content_type,
        duration_seconds=duration_seconds,
    )
    return note.to_dict()


@router.get("/people/{person_id}/voice-notes")
async def list_voice_notes(person_id: str):
    """List a person's voice notes, newest first."""
    if not get_person_store().get_by_id(person_id):
        raise HTTPException(status_code=404, detail=f"Person '{person_id}' not found")
    notes = get_voice_note_store().get_for_person(person_id)
    return {"voice_notes": [n.to_dict() for n in notes], "count": len(notes)}


@router.get("/voice-notes/{note_id}/audio")
async def get_voice_note_audio(note_id: str):
    """Stream a voice note's audio."""
    note = get_voice_note_store().get_by_id(note_id)
    if not note:
        raise HTTPException(status_code=404, detail=f"Voice note '{note_id}' not found")
    if not Path(note.file_path).is_file():
        logger.warning(f"Audio file missing for voice note {note_id}: {note.file_path}")
        raise HTTPException(status_code=404, detail=f"Audio for voice note '{note_id}' is missing")
    return FileResponse(note.file_path, media_type=note.mime_type)


@router.delete("/voice-notes/{note_id}")
async def delete_voice_note(note_id: str):
    """Delete a voice note and its audio file."""
    if not get_voice_note_store().delete(note_id):
        raise HTTPException(status_code=404, detail=f"Voice note '{note_id}' not found")
    return {"status": "deleted", "id": note_id}
