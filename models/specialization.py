"""Datenmodell für eine Fachrichtung (Pydantic v2)."""

from pydantic import BaseModel


class Specialization(BaseModel):
    """Fachrichtung: bestimmt qualifizierte Lehrkräfte und den benötigten Raumtyp."""

    id: int
    name: str           # "Physik"
    room_type_id: int   # z.B. 2 = Labor
    description: str = ""
