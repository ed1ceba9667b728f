"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from pydantic import BaseModel


class Teacher(BaseModel):
    """Repräsentiert eine einzelne Lehrkraft."""

    id: int
    first_name: str
    last_name: str
    specialization_id: int  # Bestimmt, welche Kurse unterrichtet werden dürfen

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
