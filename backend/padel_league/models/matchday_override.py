from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_league.models.season import Season


class MatchdayScheduleOverride(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("season_id", "matchday_number", name="uq_override_season_matchday"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="season.id", index=True)
    matchday_number: int
    match_date: date
    number_of_courts_override: Optional[int] = Field(default=None)
    time_slots_override: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    season: "Season" = Relationship(back_populates="matchday_overrides")
