from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_league.models.category import LeagueCategory


class LeaguePlayer(SQLModel, table=True):
    __tablename__ = "leagueplayer"

    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="leaguecategory.id", index=True)
    user_uid: Optional[str] = Field(default=None)  # null for manually added players
    name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    is_waiting_list: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    category: "LeagueCategory" = Relationship(back_populates="players")
