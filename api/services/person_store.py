"""
Person Store for Relationship OS.

Stores the people being tracked and the free-text notes kept about them.
Deleting a person cascades to their interactions, notes and commitments.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from api.services.database import connect, init_db
from config.priority_weights import DEFAULT_IMPORTANCE

logger = logging.getLogger(__name__)

PERSON_COLUMNS = "id, name, context, importance, ideal_contact_frequency_days, created_at"
NOTE_COLUMNS = "id, person_id, body, created_at, updated_at"


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored timestamp (ISO or SQLite CURRENT_TIMESTAMP), UTC if naive."""
    if not value:
        return None
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class Person:
    """A person whose relationship is being tracked."""

    name: str
    context: Optional[str] = None
    importance: int = DEFAULT_IMPORTANCE
    ideal_contact_frequency_days: Optional[int] = None  # None = no cadence target
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "context": self.context,
            "importance": self.importance,
            "ideal_contact_frequency_days": self.ideal_contact_frequency_days,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_row(cls, row: tuple) -> "Person":
        """Create Person from SQLite row (PERSON_COLUMNS order)."""
        return cls(
            id=row[0],
            name=row[1],
            context=row[2],
            importance=row[3] if row[3] is not None else DEFAULT_IMPORTANCE,
            ideal_contact_frequency_days=row[4],
            created_at=_parse_timestamp(row[5]) or datetime.now(timezone.utc),
        )


@dataclass
class PersonNote:
    """A free-text note about a person."""

    person_id: str
    body: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "id": self.id,
            "person_id": self.person_id,
            "body": self.body,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_row(cls, row: tuple) -> "PersonNote":
        """Create PersonNote from SQLite row (NOTE_COLUMNS order)."""
        return cls(
            id=row[0],
            person_id=row[1],
            body=row[2],
            created_at=_parse_timestamp(row[3]) or datetime.now(timezone.utc),
            updated_at=_parse_timestamp(row[4]),
        )


class PersonStore:
    """
    SQLite-backed storage for people and their notes.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize person store.

        Args:
            db_path: Path to SQLite database (default from settings)
        """
        self.db_path = init_db(db_path)

    # -- People ---------------------------------------------------------------

    def add(self, person: Person) -> Person:
        """Add a new person."""
        conn = connect(self.db_path)
        try:
            conn.execute(
                f"INSERT INTO people ({PERSON_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    person.id,
                    person.name,
                    person.context,
                    person.importance,
                    person.ideal_contact_frequency_days,
                    person.created_at.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

        logger.info(f"Added person {person.name} ({person.id})")
        return person

    def get_by_id(self, person_id: str) -> Optional[Person]:
        """Get person by ID."""
        conn = connect(self.db_path)
        try:
            row = conn.execute(
                f"SELECT {PERSON_COLUMNS} FROM people WHERE id = ?", (person_id,)
            ).fetchone()
            return Person.from_row(row) if row else None
        finally:
            conn.close()

    def get_all(self) -> list[Person]:
        """Get all people, most recently added first."""
        conn = connect(self.db_path)
        try:
            rows = conn.execute(
                f"SELECT {PERSON_COLUMNS} FROM people ORDER BY created_at DESC"
            ).fetchall()
            return [Person.from_row(row) for row in rows]
        finally:
            conn.close()

    def update(self, person: Person) -> Person:
        """
        Update an existing person's editable fields.

        Raises:
            KeyError: If the person does not exist
        """
        conn = connect(self.db_path)
        try:
            cursor = conn.execute(
                """
                UPDATE people
                SET name = ?, context = ?, importance = ?, ideal_contact_frequency_days = ?
                WHERE id = ?
                """,
                (
                    person.name,
                    person.context,
                    person.importance,
                    person.ideal_contact_frequency_days,
                    person.id,
                ),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise KeyError(person.id)
        finally:
            conn.close()
        return person

    def delete(self, person_id: str) -> bool:
        """
        Delete a person and, via cascade, everything owned by them.

        Returns:
            True if the person existed
        """
        conn = connect(self.db_path)
        try:
            cursor = conn.execute("DELETE FROM people WHERE id = ?", (person_id,))
            conn.commit()
            deleted = cursor.rowcount > 0
        finally:
            conn.close()

        if deleted:
            logger.info(f"Deleted person {person_id}")
        else:
            logger.warning(f"Person not found for delete: {person_id}")
        return deleted

    # -- Notes ----------------------------------------------------------------

    def add_note(self, note: PersonNote) -> PersonNote:
        """Add a note about a person."""
        conn = connect(self.db_path)
        try:
            conn.execute(
                f"INSERT INTO person_notes ({NOTE_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                (
                    note.id,
                    note.person_id,
                    note.body,
                    note.created_at.isoformat(),
                    note.updated_at.isoformat() if note.updated_at else None,
                ),
            )
            conn.commit()
        finally:
            conn.close()
        return note

    def get_note(self, note_id: str) -> Optional[PersonNote]:
        """Get a note by ID."""
        conn = connect(self.db_path)
        try:
            row = conn.execute(
                f"SELECT {NOTE_COLUMNS} FROM person_notes WHERE id = ?", (note_id,)
            ).fetchone()
            return PersonNote.from_row(row) if row else None
        finally:
            conn.close()

    def get_notes(self, person_id: str) -> list[PersonNote]:
        """Get notes for a person, newest first."""
        conn = connect(self.db_path)
        try:
            rows = conn.execute(
                f"SELECT {NOTE_COLUMNS} FROM person_notes WHERE person_id = ? ORDER BY created_at DESC",
                (person_id,),
            ).fetchall()
            return [PersonNote.from_row(row) for row in rows]
        finally:
            conn.close()

    def update_note(self, note_id: str, body: str) -> Optional[PersonNote]:
        """
        Replace a note's body and stamp updated_at.

        Returns:
            The updated note, or None if it does not exist
        """
        conn = connect(self.db_path)
        try:
            cursor = conn.execute(
                "UPDATE person_notes SET body = ?, updated_at = ? WHERE id = ?",
                (body, datetime.now(timezone.utc).isoformat(), note_id),
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None
        finally:
            conn.close()
        return self.get_note(note_id)

    def delete_note(self, note_id: str) -> bool:
        """Delete a note. Returns True if it existed."""
        conn = connect(self.db_path)
        try:
            cursor = conn.execute("DELETE FROM person_notes WHERE id = ?", (note_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()


# Singleton instance
_person_store: Optional[PersonStore] = None


def get_person_store(db_path: Optional[str] = None) -> PersonStore:
    """
    Get or create the singleton PersonStore.

    Args:
        db_path: Path to SQLite database

    Returns:
        PersonStore instance
    """
    global _person_store
    if _person_store is None:
        _person_store = PersonStore(db_path)
    return _person_store
