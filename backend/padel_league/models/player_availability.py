from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import JSON
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, SQLModel


class PlayerAvailability(SQLModel, table=True):
    """Weekly default availability for one day of the week."""

    __tablename__ = "playeravailability"
    __table_args__ = (
        SAUniqueConstraint("player_id", "season_id", "day_of_week", name="uq_availability_player_season_day"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    player_id: int = Field(foreign_key="leagueplayer.id", index=True)
    season_id: int = Field(foreign_key="season.id", index=True)
    day_of_week: int  # 0=Sunday .. 6=Saturday
    available_time_slots: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})


class PlayerAvailabilityOverride(SQLModel, table=True):
    """Date-specific availability; replaces the weekly default for that date."""

    __tablename__ = "playeravailabilityoverride"
    __table_args__ = (
        SAUniqueConstraint("player_id", "season_id", "override_date", name="uq_override_player_season_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    player_id: int = Field(foreign_key="leagueplayer.id", index=True)
    season_id: int = Field(foreign_key="season.id", index=True)
    override_date: date
    available_time_slots: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    is_unavailable: bool = Field(default=False)
    reason: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})
