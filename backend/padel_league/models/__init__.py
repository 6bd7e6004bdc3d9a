from padel_league.models.category import LeagueCategory
from padel_league.models.court import SeasonCourt
from padel_league.models.day_group import DayGroup
from padel_league.models.match_day import MatchDay
from padel_league.models.matchday_override import MatchdayScheduleOverride
from padel_league.models.player import LeaguePlayer
from padel_league.models.player_availability import PlayerAvailability, PlayerAvailabilityOverride
from padel_league.models.rotation import DoublesMatch, Rotation
from padel_league.models.season import Season

__all__ = [
    "Season",
    "MatchdayScheduleOverride",
    "LeagueCategory",
    "LeaguePlayer",
    "SeasonCourt",
    "MatchDay",
    "DayGroup",
    "Rotation",
    "DoublesMatch",
    "PlayerAvailability",
    "PlayerAvailabilityOverride",
]
