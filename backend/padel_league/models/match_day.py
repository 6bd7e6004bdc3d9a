from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_league.models.category import LeagueCategory
    from padel_league.models.day_group import DayGroup


class MatchDay(SQLModel, table=True):
    __tablename__ = "matchday"
    __table_args__ = (SAUniqueConstraint("category_id", "match_number", name="uq_matchday_category_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="leaguecategory.id", index=True)
    match_number: int
    created_at: datetime = Field(default_factory=datetime.utcnow)

    category: "LeagueCategory" = Relationship(back_populates="match_days")
    day_groups: List["DayGroup"] = Relationship(back_populates="match_day")
