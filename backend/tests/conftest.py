import os
from datetime import date
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# Keep app startup off the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from padel_league.database import get_session  # noqa: E402
from padel_league.main import app  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# Wednesday; day_of_week 3 (0=Sunday)
MATCH_DATE = date(2026, 3, 4)
MATCH_DOW = 3
SLOTS = ["18:30", "19:45", "21:00"]

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Use sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables are dropped after every test so unique constraints start clean
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session"""
    # Import all models to ensure they're registered BEFORE create_all
    import padel_league.models  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place for the
    entire duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


class LeagueBuilder:
    """Creates league rows directly in the test database"""

    def __init__(self, session: Session):
        self.session = session

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def season(self, name: str = "Spring 2026", **kwargs):
        from padel_league.models import Season

        kwargs.setdefault("start_date", date(2026, 2, 1))
        kwargs.setdefault("default_time_slots", list(SLOTS))
        return self._save(Season(name=name, **kwargs))

    def category(self, season, name: str = "Category A", **kwargs):
        from padel_league.models import LeagueCategory

        return self._save(LeagueCategory(season_id=season.id, name=name, **kwargs))

    def players(self, category, count: int, prefix: str = "Player", waiting_list: bool = False) -> List:
        from padel_league.models import LeaguePlayer

        created = []
        for i in range(count):
            created.append(
                self._save(
                    LeaguePlayer(
                        category_id=category.id,
                        name=f"{prefix} {i + 1}",
                        is_waiting_list=waiting_list,
                    )
                )
            )
        return created

    def match_day(self, category, number: int = 1):
        from padel_league.models import MatchDay

        return self._save(MatchDay(category_id=category.id, match_number=number))

    def group(self, match_day, season, number: int, players: List, slot: Optional[tuple] = None, court_id=None):
        from padel_league.models import DayGroup

        group = DayGroup(
            match_day_id=match_day.id,
            season_id=season.id,
            group_number=number,
            player_ids=[p.id if hasattr(p, "id") else p for p in players],
            court_id=court_id,
        )
        if slot:
            group.match_date, group.time_slot, group.court_index = slot
        return self._save(group)

    def courts(self, season, count: int) -> List:
        from padel_league.models import SeasonCourt

        return [
            self._save(SeasonCourt(season_id=season.id, court_number=n, name=f"Court {n}"))
            for n in range(1, count + 1)
        ]

    def weekly(self, player, season, day_of_week: int = MATCH_DOW, slots: Optional[List[str]] = None):
        from padel_league.models import PlayerAvailability

        return self._save(
            PlayerAvailability(
                player_id=player.id,
                season_id=season.id,
                day_of_week=day_of_week,
                available_time_slots=list(SLOTS if slots is None else slots),
            )
        )

    def override(self, player, season, on_date: date = MATCH_DATE, slots=None, unavailable=False, reason=None):
        from padel_league.models import PlayerAvailabilityOverride

        return self._save(
            PlayerAvailabilityOverride(
                player_id=player.id,
                season_id=season.id,
                override_date=on_date,
                available_time_slots=list(slots or []),
                is_unavailable=unavailable,
                reason=reason,
            )
        )

    def matchday_override(self, season, number: int, match_date: date = MATCH_DATE, **kwargs):
        from padel_league.models import MatchdayScheduleOverride

        return self._save(
            MatchdayScheduleOverride(season_id=season.id, matchday_number=number, match_date=match_date, **kwargs)
        )


@pytest.fixture(name="league")
def league_fixture(session: Session) -> LeagueBuilder:
    return LeagueBuilder(session)
