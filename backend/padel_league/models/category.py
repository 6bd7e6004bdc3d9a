from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_league.models.match_day import MatchDay
    from padel_league.models.player import LeaguePlayer
    from padel_league.models.season import Season


class LeagueCategory(SQLModel, table=True):
    __tablename__ = "leaguecategory"

    id: Optional[int] = Field(default=None, primary_key=True)
    season_id: int = Field(foreign_key="season.id", index=True)
    name: str
    level: str = Field(default="")
    max_players: int = Field(default=16)

    # Playoff configuration (null = use season default)
    players_direct_to_final: Optional[int] = Field(default=None)
    players_in_semifinals: Optional[int] = Field(default=None)

    # Court indexes auto-scheduling tries first for this category
    recommended_courts: Optional[List[int]] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=datetime.utcnow)

    season: "Season" = Relationship(back_populates="categories")
    players: List["LeaguePlayer"] = Relationship(back_populates="category")
    match_days: List["MatchDay"] = Relationship(back_populates="category")
