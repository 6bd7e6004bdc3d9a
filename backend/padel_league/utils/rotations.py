"""
Rotation Generator

A day-group of 4 players [P0, P1, P2, P3] plays 3 doubles rotations:

    Rotation 1: (P0, P1) vs (P2, P3)
    Rotation 2: (P0, P2) vs (P1, P3)
    Rotation 3: (P0, P3) vs (P1, P2)

Every player partners each other player once and opposes each twice.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, func, select

from padel_league.models.day_group import DayGroup
from padel_league.models.rotation import DoublesMatch, Rotation
from padel_league.utils.errors import NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

GROUP_SIZE = 4

# (rotation_number, team1 positions, team2 positions)
ROTATION_LAYOUT: List[Tuple[int, Tuple[int, int], Tuple[int, int]]] = [
    (1, (0, 1), (2, 3)),
    (2, (0, 2), (1, 3)),
    (3, (0, 3), (1, 2)),
]

CREATED = "created"
ALREADY_EXISTS = "already_exists"


@dataclass(frozen=True)
class RotationPairing:
    rotation_number: int
    team1: Tuple[int, int]
    team2: Tuple[int, int]


def generate_rotations(player_ids: Sequence[int]) -> List[RotationPairing]:
    """Derive the 3 fixed pairings from the group's player order."""
    if len(player_ids) != GROUP_SIZE:
        raise ValidationError(f"Day group needs exactly {GROUP_SIZE} players (has {len(player_ids)})")
    if len(set(player_ids)) != GROUP_SIZE:
        raise ValidationError("Day group has duplicate players")

    return [
        RotationPairing(
            rotation_number=number,
            team1=(player_ids[a1], player_ids[a2]),
            team2=(player_ids[b1], player_ids[b2]),
        )
        for number, (a1, a2), (b1, b2) in ROTATION_LAYOUT
    ]


def count_rotations(session: Session, day_group_id: int) -> int:
    return int(session.exec(select(func.count(Rotation.id)).where(Rotation.day_group_id == day_group_id)).one())


def regenerate_rotations(session: Session, day_group_id: int) -> str:
    """
    Create the group's rotations and their doubles matches if none exist.

    Returns:
        CREATED or ALREADY_EXISTS

    Raises:
        NotFoundError, ValidationError (player count), PersistenceError
    """
    group = session.get(DayGroup, day_group_id)
    if not group:
        raise NotFoundError(f"Day group {day_group_id} not found")

    pairings = generate_rotations(group.player_ids or [])

    existing = count_rotations(session, day_group_id)
    if existing > 0:
        logger.info("Day group %d already has %d rotations", day_group_id, existing)
        return ALREADY_EXISTS

    try:
        for pairing in pairings:
            rotation = Rotation(day_group_id=day_group_id, rotation_number=pairing.rotation_number)
            session.add(rotation)
            session.flush()
            session.add(
                DoublesMatch(
                    rotation_id=rotation.id,
                    team1_player1_id=pairing.team1[0],
                    team1_player2_id=pairing.team1[1],
                    team2_player1_id=pairing.team2[0],
                    team2_player2_id=pairing.team2[1],
                )
            )
        session.commit()
    except IntegrityError:
        # Another request created them between the count and the insert
        session.rollback()
        logger.info("Rotations for day group %d were created concurrently", day_group_id)
        return ALREADY_EXISTS
    except SQLAlchemyError as e:
        session.rollback()
        logger.exception("Failed to create rotations for day group %d", day_group_id)
        raise PersistenceError(f"Failed to create rotations: {e}")

    logger.info("Created %d rotations for day group %d", len(pairings), day_group_id)
    return CREATED
