"""
Commitment Tracking Service for Relationship OS.

Tracks things promised to or for a person. An open commitment that is due
soon (or has no due date) is an "open loop" and raises the person's weekly
review priority.

Supports tracking status: open, closed.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from api.services.contact_dates import parse_date
from api.services.database import connect, init_db
from config.priority_weights import OPEN_LOOP_LOOKAHEAD_DAYS

logger = logging.getLogger(__name__)

STATUS_OPEN = "open"
STATUS_CLOSED = "closed"
COMMITMENT_STATUSES = (STATUS_OPEN, STATUS_CLOSED)

COMMITMENT_COLUMNS = "id, person_id, description, due_date, status, created_at, completed_at"


def _make_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure datetime is timezone-aware (UTC if naive)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class Commitment:
    """A commitment owed to or involving a person."""

    person_id: str
    description: str
    due_date: Optional[date] = None
    status: str = STATUS_OPEN
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "id": self.id,
            "person_id": self.person_id,
            "description": self.description,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_row(cls, row: tuple) -> "Commitment":
        """Create Commitment from SQLite row (COMMITMENT_COLUMNS order)."""
        return cls(
            id=row[0],
            person_id=row[1],
            description=row[2] or "",
            due_date=parse_date(row[3]),
            status=row[4] or STATUS_OPEN,
            created_at=_make_aware(datetime.fromisoformat(row[5])) if row[5] else datetime.now(timezone.utc),
            completed_at=_make_aware(datetime.fromisoformat(row[6])) if row[6] else None,
        )

    def is_open_loop(self, today: date, lookahead_days: int = OPEN_LOOP_LOOKAHEAD_DAYS) -> bool:
        """Open and either undated or due within the lookahead window."""
        if self.status != STATUS_OPEN:
            return False
        if self.due_date is None:
            return True
        return self.due_date <= today + timedelta(days=lookahead_days)


class CommitmentStore:
    """
    SQLite-backed storage for commitments.

    Provides per-person queries, closing, and open-loop counts for the
    weekly review.
    """

    def __init__(self, db_path: Optional[str] = None):
        """Initialize commitment store."""
        self.db_path = init_db(db_path)

    def add(self, commitment: Commitment) -> Commitment:
        """
        Add a commitment.

        Raises:
            ValueError: If the status is not open or closed
        """
        if commitment.status not in COMMITMENT_STATUSES:
            raise ValueError(f"Unknown commitment status: {commitment.status}")

        conn = connect(self.db_path)
        try:
            conn.execute(
                f"INSERT INTO commitments ({COMMITMENT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    commitment.id,
                    commitment.person_id,
                    commitment.description,
                    commitment.due_date.isoformat() if commitment.due_date else None,
                    commitment.status,
                    commitment.created_at.isoformat(),
                    commitment.completed_at.isoformat() if commitment.completed_at else None,
                ),
            )
            conn.commit()
        finally:
            conn.close()
        return commitment

    def get_by_id(self, commitment_id: str) -> Optional[Commitment]:
        """Get commitment by ID."""
        conn = connect(self.db_path)
        try:
            row = conn.execute(
                f"SELECT {COMMITMENT_COLUMNS} FROM commitments WHERE id = ?",
                (commitment_id,),
            ).fetchone()
            return Commitment.from_row(row) if row else None
        finally:
            conn.close()

    def get_for_person(self, person_id: str, status: Optional[str] = None) -> list[Commitment]:
        """Get commitments for a person, optionally filtered by status."""
        query = f"SELECT {COMMITMENT_COLUMNS} FROM commitments WHERE person_id = ?"
        params: list = [person_id]
        if status:
            query += " AND status = ?"
            params.append(status)
        query += " ORDER BY due_date IS NULL, due_date ASC, created_at DESC"

        conn = connect(self.db_path)
        try:
            return [Commitment.from_row(row) for row in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    def close(self, commitment_id: str) -> Optional[Commitment]:
        """
        Mark a commitment closed.

        Returns:
            The updated commitment, or None if it does not exist
        """
        conn = connect(self.db_path)
        try:
            cursor = conn.execute(
                "UPDATE commitments SET status = ?, completed_at = ? WHERE id = ?",
                (STATUS_CLOSED, datetime.now(timezone.utc).isoformat(), commitment_id),
            )
            conn.commit()
            if cursor.rowcount == 0:
                logger.warning(f"Commitment not found: {commitment_id}")
                return None
        finally:
            conn.close()
        return self.get_by_id(commitment_id)

    def count_open_loops(
        self,
        today: date,
        lookahead_days: int = OPEN_LOOP_LOOKAHEAD_DAYS,
    ) -> dict[str, int]:
        """
        Count open loops per person.

        An open loop is an open commitment with no due date or one due on or
        before today + lookahead_days. Overdue commitments count.

        Returns:
            Dict mapping person_id to open loop count (people with none omitted)
        """
        conn = connect(self.db_path)
        try:
            rows = conn.execute(
                f"SELECT {COMMITMENT_COLUMNS} FROM commitments WHERE status = ?",
                (STATUS_OPEN,),
            ).fetchall()
        finally:
            conn.close()

        counts: dict[str, int] = {}
        for row in rows:
            commitment = Commitment.from_row(row)
            if commitment.is_open_loop(today, lookahead_days):
                counts[commitment.person_id] = counts.get(commitment.person_id, 0) + 1
        return counts


# Singleton instance
_commitment_store: Optional[CommitmentStore] = None


def get_commitment_store(db_path: Optional[str] = None) -> CommitmentStore:
    """Get or create the singleton CommitmentStore."""
    global _commitment_store
    if _commitment_store is None:
        _commitment_store = CommitmentStore(db_path)
    return _commitment_store
