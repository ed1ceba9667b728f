"""Datenmodell für einen Unterrichtsraum (Pydantic v2)."""

from pydantic import BaseModel, Field


class Classroom(BaseModel):
    """Repräsentiert einen Raum."""

    id: int
    name: str           # "R 204", "Labor 1"
    room_type_id: int   # Seminarraum, Labor, ...
    capacity: int = Field(30, ge=1)
