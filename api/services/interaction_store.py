"""
Interaction Store for Relationship OS.

Stores logged touchpoints with a person (call, message, meeting, ...).
Each interaction has an occurrence date and optional free-text notes.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional, Union

from api.services.contact_dates import parse_date
from api.services.database import connect, init_db

logger = logging.getLogger(__name__)

INTERACTION_TYPES = ("call", "message", "meeting", "video", "voice_note", "other")


@dataclass
class Interaction:
    """A single logged interaction with a person."""

    person_id: str
    date: Union[date, datetime, str]
    type: Optional[str] = None
    notes: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def occurred_on(self) -> Optional[date]:
        """Calendar date of the interaction, or None if the stored value is unparsable."""
        return parse_date(self.date)

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "id": self.id,
            "person_id": self.person_id,
            "date": self.date if isinstance(self.date, str) else self.date.isoformat(),
            "type": self.type,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_row(cls, row: tuple) -> "Interaction":
        """Create Interaction from SQLite row.

        Column order: 0: id, 1: person_id, 2: date, 3: type, 4: notes, 5: created_at
        """
        created_at = datetime.fromisoformat(row[5]) if row[5] else datetime.now(timezone.utc)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=row[0],
            person_id=row[1],
            date=row[2],
            type=row[3],
            notes=row[4],
            created_at=created_at,
        )


class InteractionStore:
    """
    SQLite-backed interaction storage.

    Interactions are only ever looked at per person, most recent first.
    """

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize interaction store.

        Args:
            db_path: Path to SQLite database (default from settings)
        """
        self.db_path = init_db(db_path)

    def add(self, interaction: Interaction) -> Interaction:
        """
        Add a new interaction.

        Raises:
            ValueError: If the interaction type is not a known type
        """
        if interaction.type is not None and interaction.type not in INTERACTION_TYPES:
            raise ValueError(f"Unknown interaction type: {interaction.type}")

        stored_date = interaction.date
        if not isinstance(stored_date, str):
            stored_date = stored_date.isoformat()

        conn = connect(self.db_path)
        try:
            conn.execute(
                """
                INSERT INTO interactions (id, person_id, date, type, notes, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    interaction.id,
                    interaction.person_id,
                    stored_date,
                    interaction.type,
                    interaction.notes,
                    interaction.created_at.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug(f"Logged {interaction.type or 'untyped'} interaction for {interaction.person_id}")
        return interaction

    def get_by_id(self, interaction_id: str) -> Optional[Interaction]:
        """Get interaction by ID."""
        conn = connect(self.db_path)
        try:
            row = conn.execute(
                "SELECT id, person_id, date, type, notes, created_at FROM interactions WHERE id = ?",
                (interaction_id,),
            ).fetchone()
            return Interaction.from_row(row) if row else None
        finally:
            conn.close()

    def get_for_person(self, person_id: str, limit: Optional[int] = None) -> list[Interaction]:
        """
        Get interactions for a person, most recent first.

        Args:
            person_id: Person ID
            limit: Maximum interactions to return (default all)
        """
        query = """
            SELECT id, person_id, date, type, notes, created_at
            FROM interactions
            WHERE person_id = ?
            ORDER BY date DESC, created_at DESC
        """
        params: list = [person_id]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        conn = connect(self.db_path)
        try:
            return [Interaction.from_row(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    def get_last_date(self, person_id: str) -> Optional[date]:
        """Most recent parsable interaction date for a person."""
        conn = connect(self.db_path)
        try:
            rows = conn.execute(
                "SELECT person_id, date FROM interactions WHERE person_id = ?",
                (person_id,),
            ).fetchall()
        finally:
            conn.close()
        return _latest_by_person(rows).get(person_id)

    def get_last_dates(self) -> dict[str, date]:
        """
        Most recent parsable interaction date for every person with history.

        Unparsable stored dates are skipped rather than compared as strings.
        """
        conn = connect(self.db_path)
        try:
            rows = conn.execute("SELECT person_id, date FROM interactions").fetchall()
        finally:
            conn.close()
        return _latest_by_person(rows)

    def delete(self, interaction_id: str) -> bool:
        """Delete an interaction. Returns True if a row was removed."""
        conn = connect(self.db_path)
        try:
            cursor = conn.execute("DELETE FROM interactions WHERE id = ?", (interaction_id,))
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()


def _latest_by_person(rows: list[tuple]) -> dict[str, date]:
    latest: dict[str, date] = {}
    for person_id, raw_date in rows:
        parsed = parse_date(raw_date)
        if parsed is None:
            continue
        if person_id not in latest or parsed > latest[person_id]:
            latest[person_id] = parsed
    return latest


# Singleton instance
_interaction_store: Optional[InteractionStore] = None


def get_interaction_store(db_path: Optional[str] = None) -> InteractionStore:
    """
    Get or create the singleton InteractionStore.

    Args:
        db_path: Path to SQLite database

    Returns:
        InteractionStore instance
    """
    global _interaction_store
    if _interaction_store is None:
        _interaction_store = InteractionStore(db_path)
    return _interaction_store
