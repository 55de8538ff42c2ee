from __future__ import annotations

import random
from pathlib import Path
from typing import List, Optional

from loguru import logger

from santa.services.arcs import Arc, build_arcs
from santa.services.notify import send_matchings
from santa.services.roster import SantaConfig, load_config
from santa.services.solver import assignment_cycles, solve_assignment


def draw(config: SantaConfig, seed: Optional[int] = None) -> List[Arc]:
    arcs = build_arcs(config.participants, rng=random.Random(seed))
    assignment = solve_assignment(arcs, config.identities)
    cycles = assignment_cycles(assignment)
    logger.info(
        "Drew {count} pairs in {cycles} cycles",
        count=len(assignment),
        cycles=len(cycles),
    )
    return assignment


def run(
    config_path: str | Path,
    send: bool = False,
    seed: Optional[int] = None,
    smtp_password: Optional[str] = None,
) -> List[Arc]:
    config = load_config(config_path, smtp_password=smtp_password)
    assignment = draw(config, seed=seed)
    send_matchings(config, assignment, send=send)
    return assignment
