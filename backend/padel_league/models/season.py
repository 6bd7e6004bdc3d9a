from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_league.models.category import LeagueCategory
    from padel_league.models.court import SeasonCourt
    from padel_league.models.matchday_override import MatchdayScheduleOverride

DEFAULT_NUMBER_OF_COURTS = 4
DEFAULT_TIME_SLOTS = ["18:30", "19:45", "21:00"]


class Season(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = Field(default=False)
    registrations_open: bool = Field(default=False)

    # Schedule defaults, overridable per matchday
    default_number_of_courts: int = Field(default=DEFAULT_NUMBER_OF_COURTS)
    default_time_slots: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TIME_SLOTS), sa_column=Column(JSON, nullable=False)
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    categories: List["LeagueCategory"] = Relationship(back_populates="season")
    courts: List["SeasonCourt"] = Relationship(back_populates="season")
    matchday_overrides: List["MatchdayScheduleOverride"] = Relationship(back_populates="season")
