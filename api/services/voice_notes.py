"""
Voice Note Storage for Relationship OS.

Recorded audio about a person. The audio bytes live on disk under the
configured voice notes directory (one folder per person); the SQLite row
keeps the path and metadata. Deleting a person cascades to the rows, and
the route layer removes the files.
"""
import logging
import shutil
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from api.services.database import connect, init_db
from config.settings import settings

logger = logging.getLogger(__name__)

VOICE_NOTE_COLUMNS = "id, person_id, file_path, mime_type, size_bytes, duration_seconds, created_at"

DEFAULT_MIME_TYPE = "audio/webm"

# File extension per audio MIME type; anything else is stored as .audio
AUDIO_EXTENSIONS = {
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/mpeg": "mp3",
    "audio/mp4": "m4a",
    "audio/x-m4a": "m4a",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
}


def _make_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure datetime is timezone-aware (UTC if naive)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def normalize_mime_type(content_type: Optional[str]) -> str:
    """Drop parameters ("audio/webm;codecs=opus" -> "audio/webm") and lowercase."""
    base = (content_type or "").split(";", 1)[0].strip().lower()
    return base or DEFAULT_MIME_TYPE


def is_audio_mime_type(content_type: Optional[str]) -> bool:
    return normalize_mime_type(content_type).startswith("audio/")


@dataclass
class VoiceNote:
    """A recorded voice note about a person."""

    person_id: str
    file_path: str
    mime_type: str = DEFAULT_MIME_TYPE
    size_bytes: int = 0
    duration_seconds: Optional[int] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "id": self.id,
            "person_id": self.person_id,
            "mime_type": self.mime_type,
            "size_bytes": self.size_bytes,
            "duration_seconds": self.duration_seconds,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "audio_url": f"/api/voice-notes/{self.id}/audio",
        }

    @classmethod
    def from_row(cls, row: tuple) -> "VoiceNote":
        """Create VoiceNote from SQLite row (VOICE_NOTE_COLUMNS order)."""
        return cls(
            id=row[0],
            person_id=row[1],
            file_path=row[2],
            mime_type=row[3] or DEFAULT_MIME_TYPE,
            size_bytes=row[4] or 0,
            duration_seconds=row[5],
            created_at=_make_aware(datetime.fromisoformat(row[6])) if row[6] else datetime.now(timezone.utc),
        )


class VoiceNoteStore:
    """
    SQLite-backed metadata plus on-disk audio for voice notes.

    Files are written to ``<storage_dir>/<person_id>/<note_id>.<ext>``.
    """

    def __init__(self, db_path: Optional[str] = None, storage_dir: Optional[str] = None):
        """Initialize voice note store."""
        self.db_path = init_db(db_path)
        self.storage_dir = Path(storage_dir or settings.voice_notes_path)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def save(
        self,
        person_id: str,
        content: bytes,
        mime_type: Optional[str] = None,
        duration_seconds: Optional[int] = None,
    ) -> VoiceNote:
        """
        Write the audio to disk and record it.

        Args:
            person_id: Person the note is about (must exist)
            content: Raw audio bytes
            mime_type: Content type of the upload (parameters are dropped)
            duration_seconds: Recording length, if the client knows it

        Returns:
            The stored VoiceNote

        Raises:
            ValueError: If the content is empty
            sqlite3.IntegrityError: If the person does not exist
        """
        if not content:
            raise ValueError("Voice note is empty")

        mime_type = normalize_mime_type(mime_type)
        note = VoiceNote(
            person_id=person_id,
            file_path="",
            mime_type=mime_type,
            size_bytes=len(content),
            duration_seconds=duration_seconds,
        )
        extension = AUDIO_EXTENSIONS.get(mime_type, "audio")
        path = self.storage_dir / person_id / f"{note.id}.{extension}"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        note.file_path = str(path)

        conn = connect(self.db_path)
        try:
            conn.execute(
                f"INSERT INTO voice_notes ({VOICE_NOTE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    note.id,
                    note.person_id,
                    note.file_path,
                    note.mime_type,
                    note.size_bytes,
                    note.duration_seconds,
                    note.created_at.isoformat(),
                ),
            )
            conn.commit()
        except Exception:
            path.unlink(missing_ok=True)
            raise
        finally:
            conn.close()

        logger.info(f"Saved voice note {note.id} for {person_id} ({note.size_bytes} bytes)")
        return note

    def get_by_id(self, note_id: str) -> Optional[VoiceNote]:
        """Get voice note by ID."""
        conn = connect(self.db_path)
        try:
            row = conn.execute(
                f"SELECT {VOICE_NOTE_COLUMNS} FROM voice_notes WHERE id = ?",
                (note_id,),
            ).fetchone()
            return VoiceNote.from_row(row) if row else None
        finally:
            conn.close()

    def get_for_person(self, person_id: str) -> list[VoiceNote]:
        """Get a person's voice notes, newest first."""
        conn = connect(self.db_path)
        try:
            rows = conn.execute(
                f"SELECT {VOICE_NOTE_COLUMNS} FROM voice_notes WHERE person_id = ? ORDER BY created_at DESC",
                (person_id,),
            ).fetchall()
            return [VoiceNote.from_row(row) for row in rows]
        finally:
            conn.close()

    def delete(self, note_id: str) -> bool:
        """
        Delete a voice note row and its audio file.

        Returns:
            True if the note existed
        """
        note = self.get_by_id(note_id)
        if note is None:
            logger.warning(f"Voice note not found: {note_id}")
            return False

        conn = connect(self.db_path)
        try:
            conn.execute("DELETE FROM voice_notes WHERE id = ?", (note_id,))
            conn.commit()
        finally:
            conn.close()

        try:
            Path(note.file_path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove audio for voice note {note_id}: {e}")
        return True

    def delete_files_for_person(self, person_id: str) -> None:
        """Remove a person's audio folder (rows go with the person via cascade)."""
        folder = self.storage_dir / person_id
        if not folder.exists():
            return
        try:
            shutil.rmtree(folder)
            logger.info(f"Removed voice notes folder for {person_id}")
        except OSError as e:
            logger.warning(f"Failed to remove voice notes folder {folder}: {e}")


# Singleton instance
_voice_note_store: Optional[VoiceNoteStore] = None


def get_voice_note_store(db_path: Optional[str] = None) -> VoiceNoteStore:
    """Get or create the singleton VoiceNoteStore."""
    global _voice_note_store
    if _voice_note_store is None:
        _voice_note_store = VoiceNoteStore(db_path)
    return _voice_note_store
