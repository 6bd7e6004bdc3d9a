from datetime import date, datetime
from typing import TYPE_CHECKING, List, Optional, Tuple

from sqlalchemy import JSON
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_league.models.match_day import MatchDay
    from padel_league.models.rotation import Rotation


class DayGroup(SQLModel, table=True):
    __tablename__ = "daygroup"
    __table_args__ = (
        # NULLs never collide, so unassigned groups are unconstrained
        SAUniqueConstraint("season_id", "match_date", "time_slot", "court_index", name="uq_daygroup_slot"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    match_day_id: int = Field(foreign_key="matchday.id", index=True)
    season_id: int = Field(foreign_key="season.id", index=True)
    group_number: int
    player_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Slot assignment: all set or all null
    match_date: Optional[date] = Field(default=None)
    time_slot: Optional[str] = Field(default=None)  # "HH:MM"
    court_index: Optional[int] = Field(default=None)
    court_id: Optional[int] = Field(default=None, foreign_key="seasoncourt.id")

    # Bumped on every slot write; writers compare-and-swap on it
    version: int = Field(default=1)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    match_day: "MatchDay" = Relationship(back_populates="day_groups")
    rotations: List["Rotation"] = Relationship(back_populates="day_group")

    @property
    def slot(self) -> Optional[Tuple[date, str, int]]:
        if self.match_date is None or self.time_slot is None or self.court_index is None:
            return None
        return (self.match_date, self.time_slot, self.court_index)
