"""
People API endpoints for Relationship OS.

People, the interactions logged with them, notes about them and the
commitments owed to them. List and detail responses are decorated with
contact cadence metrics.
"""
from datetime import date
from typing import Literal, Optional
import logging

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from api.services.commitments import Commitment, get_commitment_store
from api.services.contact_dates import format_display_date, format_relative_days
from api.services.contact_schedule import compute_schedule_from_interactions
from api.services.interaction_store import Interaction, get_interaction_store
from api.services.people_directory import list_people
from api.services.person_store import Person, PersonNote, get_person_store
from api.services.voice_notes import get_voice_note_store
from config.priority_weights import MAX_CONTACT_FREQUENCY_DAYS, MAX_IMPORTANCE, MIN_IMPORTANCE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["people"])

InteractionType = Literal["call", "message", "meeting", "video", "voice_note", "other"]


class PersonCreateRequest(BaseModel):
    """Request to add a person."""
    name: str


class PersonUpdateRequest(BaseModel):
    """Partial update of a person's details. 0 clears the contact frequency."""
    name: Optional[str] = None
    context: Optional[str] = None
    importance: Optional[int] = Field(default=None, ge=MIN_IMPORTANCE, le=MAX_IMPORTANCE)
    ideal_contact_frequency_days: Optional[int] = Field(
        default=None, ge=0, le=MAX_CONTACT_FREQUENCY_DAYS
    )


class InteractionCreateRequest(BaseModel):
    """Request to log an interaction. Date defaults to today."""
    occurred_on: Optional[date] = Field(default=None, alias="date")
    type: Optional[InteractionType] = None
    notes: Optional[str] = None


class NoteRequest(BaseModel):
    """Request to add or edit a note."""
    body: str


class CommitmentCreateRequest(BaseModel):
    """Request to add a commitment."""
    description: str
    due_date: Optional[date] = None


class PeopleListResponse(BaseModel):
    """Response for the people list."""
    people: list[dict]
    count: int


def _require_person(person_id: str) -> Person:
    person = get_person_store().get_by_id(person_id)
    if not person:
        raise HTTPException(status_code=404, detail=f"Person '{person_id}' not found")
    return person


def _require_text(value: Optional[str], field_name: str) -> str:
    trimmed = (value or "").strip()
    if not trimmed:
        raise HTTPException(status_code=400, detail=f"{field_name} cannot be empty")
    return trimmed


@router.get("/people", response_model=PeopleListResponse)
async def get_people(
    sort: str = Query("name", description="name, last_contact, next_contact or overdue"),
    overdue_only: bool = Query(False, description="Only people whose next contact is overdue"),
    today: Optional[date] = Query(None, description="Reference day (defaults to today)"),
):
    """List people with contact cadence metrics."""
    try:
        entries = list_people(today=today, sort=sort, overdue_only=overdue_only)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PeopleListResponse(
        people=[entry.to_dict() for entry in entries],
        count=len(entries),
    )


@router.post("/people", status_code=201)
async def create_person(request: PersonCreateRequest):
    """Add a person by name."""
    name = _require_text(request.name, "Name")
    person = get_person_store().add(Person(name=name))
    return person.to_dict()


@router.get("/people/{person_id}")
async def get_person(
    person_id: str,
    today: Optional[date] = Query(None, description="Reference day (defaults to today)"),
):
    """
    Get a person's profile.

    Includes contact metrics and their display labels, interactions (most
    recent first), notes, commitments and voice notes.
    """
    if today is None:
        today = date.today()
    person = _require_person(person_id)

    interactions = get_interaction_store().get_for_person(person_id)
    metrics = compute_schedule_from_interactions(
        interactions,
        person.ideal_contact_frequency_days,
        today,
    )

    return {
        "person": person.to_dict(),
        "metrics": metrics.to_dict(),
        "labels": {
            "last_contact": format_display_date(metrics.last_contact_date),
            "last_contact_relative": (
                format_relative_days(metrics.days_since_last)
                if metrics.last_contact_date
                else "No interactions yet"
            ),
            "next_contact": format_display_date(metrics.next_contact_date),
            "next_contact_relative": metrics.next_contact_label,
        },
        "interactions": [i.to_dict() for i in interactions],
        "notes": [n.to_dict() for n in get_person_store().get_notes(person_id)],
        "commitments": [c.to_dict() for c in get_commitment_store().get_for_person(person_id)],
        "voice_notes": [v.to_dict() for v in get_voice_note_store().get_for_person(person_id)],
    }


@router.patch("/people/{person_id}")
async def update_person(person_id: str, request: PersonUpdateRequest):
    """Update a person's details."""
    person = _require_person(person_id)

    if request.name is not None:
        person.name = _require_text(request.name, "Name")
    if request.context is not None:
        person.context = request.context.strip() or None
    if request.importance is not None:
        person.importance = request.importance
    if "ideal_contact_frequency_days" in request.model_fields_set:
        frequency = request.ideal_contact_frequency_days
        person.ideal_contact_frequency_days = frequency if frequency else None

    get_person_store().update(person)
    return person.to_dict()


@router.delete("/people/{person_id}")
async def delete_person(person_id: str):
    """Delete a person along with their interactions, notes, commitments and voice notes."""
    if not get_person_store().delete(person_id):
        raise HTTPException(status_code=404, detail=f"Person '{person_id}' not found")
    get_voice_note_store().delete_files_for_person(person_id)
    return {"status": "deleted", "id": person_id}


@router.post("/people/{person_id}/interactions", status_code=201)
async def log_interaction(person_id: str, request: InteractionCreateRequest):
    """Log an interaction with a person."""
    _require_person(person_id)
    interaction = Interaction(
        person_id=person_id,
        date=request.occurred_on or date.today(),
        type=request.type,
        notes=(request.notes or "").strip() or None,
    )
    get_interaction_store().add(interaction)
    return interaction.to_dict()


@router.delete("/interactions/{interaction_id}")
async def delete_interaction(interaction_id: str):
    """Delete a logged interaction."""
    if not get_interaction_store().delete(interaction_id):
        raise HTTPException(status_code=404, detail=f"Interaction '{interaction_id}' not found")
    return {"status": "deleted", "id": interaction_id}


@router.post("/people/{person_id}/notes", status_code=201)
async def add_note(person_id: str, request: NoteRequest):
    """Add a note about a person."""
    _require_person(person_id)
    body = _require_text(request.body, "Note")
    note = get_person_store().add_note(PersonNote(person_id=person_id, body=body))
    return note.to_dict()


@router.patch("/notes/{note_id}")
async def edit_note(note_id: str, request: NoteRequest):
    """Replace a note's text."""
    body = _require_text(request.body, "Note")
    note = get_person_store().update_note(note_id, body)
    if not note:
        raise HTTPException(status_code=404, detail=f"Note '{note_id}' not found")
    return note.to_dict()


@router.delete("/notes/{note_id}")
async def delete_note(note_id: str):
    """Delete a note."""
    if not get_person_store().delete_note(note_id):
        raise HTTPException(status_code=404, detail=f"Note '{note_id}' not found")
    return {"status": "deleted", "id": note_id}


@router.post("/people/{person_id}/commitments", status_code=201)
async def add_commitment(person_id: str, request: CommitmentCreateRequest):
    """Add a commitment for a person."""
    _require_person(person_id)
    description = _require_text(request.description, "Description")
    commitment = get_commitment_store().add(
        Commitment(person_id=person_id, description=description, due_date=request.due_date)
    )
    return commitment.to_dict()


@router.post("/commitments/{commitment_id}/close")
async def close_commitment(commitment_id: str):
    """Mark a commitment closed."""
    commitment = get_commitment_store().close(commitment_id)
    if not commitment:
        raise HTTPException(status_code=404, detail=f"Commitment '{commitment_id}' not found")
    return commitment.to_dict()
