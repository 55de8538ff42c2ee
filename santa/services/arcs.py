from __future__ import annotations

import random
from itertools import combinations
from typing import List, Optional, Sequence, Set, Tuple

from loguru import logger

from santa.services.roster import Participant

Arc = Tuple[str, str]


def _excluded_arcs(participants: Sequence[Participant]) -> Set[Arc]:
    return {
        (participant.email, excluded)
        for participant in participants
        for excluded in participant.exclude
    }


def build_arcs(
    participants: Sequence[Participant],
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[Arc]:
    """Return every permissible giver -> recipient arc in random order.

    Exclusions are one-directional: ``A`` excluding ``B`` removes only
    ``(A, B)``. The order is the only source of variation between runs, so
    pass ``seed`` or ``rng`` when a reproducible draw is wanted.
    """
    nodes = [participant.email for participant in participants]
    if len(set(nodes)) != len(nodes):
        raise ValueError("Participant emails must be unique.")

    pairs = list(combinations(nodes, 2))
    candidates = [(j, i) for i, j in pairs] + pairs
    excluded = _excluded_arcs(participants)
    arcs = [arc for arc in candidates if arc not in excluded]

    rng = rng or random.Random(seed)
    rng.shuffle(arcs)

    logger.bind(participants=len(nodes)).debug(
        "Built {kept} arcs ({dropped} excluded)",
        kept=len(arcs),
        dropped=len(candidates) - len(arcs),
    )
    return arcs
