"""Datenmodell für ein Semester (Pydantic v2)."""

from datetime import date
from typing import Optional

from pydantic import BaseModel


class Semester(BaseModel):
    """Ein Semester innerhalb eines Studienjahres."""

    id: int
    name: str                   # "Herbst 2025"
    year: int
    order_in_year: int          # entspricht Course.semester_order
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = False
