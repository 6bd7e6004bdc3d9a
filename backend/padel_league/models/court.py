from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_league.models.season import Season


class SeasonCourt(SQLModel, table=True):
    __tablename__ = "seasoncourt"
    __table_args__ = (
        SAUniqueConstraint("season_id", "court_number", name="uq_court_season_number"),
        SAUniqueConstraint("season_id", "name", name="uq_court_season_name"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="season.id", index=True)
    court_number: int  # 1-based, matches DayGroup.court_index
    name: str
    is_active: bool = Field(default=True)  # courts are never hard-deleted
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    season: "Season" = Relationship(back_populates="courts")
