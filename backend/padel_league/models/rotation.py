from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_league.models.day_group import DayGroup


class Rotation(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("day_group_id", "rotation_number", name="uq_rotation_group_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    day_group_id: int = Field(foreign_key="daygroup.id", index=True)
    rotation_number: int  # 1..3
    created_at: datetime = Field(default_factory=datetime.utcnow)

    day_group: "DayGroup" = Relationship(back_populates="rotations")
    match: Optional["DoublesMatch"] = Relationship(
        back_populates="rotation", sa_relationship_kwargs={"uselist": False}
    )


class DoublesMatch(SQLModel, table=True):
    __tablename__ = "doublesmatch"

    id: Optional[int] = Field(default=None, primary_key=True)
    rotation_id: int = Field(foreign_key="rotation.id", unique=True)
    team1_player1_id: int = Field(foreign_key="leagueplayer.id")
    team1_player2_id: int = Field(foreign_key="leagueplayer.id")
    team2_player1_id: int = Field(foreign_key="leagueplayer.id")
    team2_player2_id: int = Field(foreign_key="leagueplayer.id")
    score_team1: Optional[int] = Field(default=None)
    score_team2: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    rotation: "Rotation" = Relationship(back_populates="match")
