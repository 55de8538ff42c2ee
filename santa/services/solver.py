from __future__ import annotations

from collections import Counter
from typing import Dict, List, Sequence

import pulp
from loguru import logger

from santa.core.errors import InfeasibleAssignmentError
from santa.services.arcs import Arc

INFEASIBLE_MESSAGE = "no valid assignment exists given the current exclusion constraints"


def _is_valid(selected: Sequence[Arc], identities: Sequence[str]) -> bool:
    givers = Counter(giver for giver, _ in selected)
    recipients = Counter(recipient for _, recipient in selected)
    expected = Counter(identities)
    return givers == expected and recipients == expected


def solve_assignment(arcs: Sequence[Arc], identities: Sequence[str]) -> List[Arc]:
    """Select one outgoing and one incoming arc for every identity.

    The model has no objective; any feasible selection is accepted, so the
    order of ``arcs`` decides which of several valid assignments CBC lands on.
    Raises ``InfeasibleAssignmentError`` for anything but an optimal status.
    """
    nodes = list(identities)
    log = logger.bind(participants=len(nodes), arcs=len(arcs))

    if len(nodes) < 2:
        log.warning("Too few participants for an assignment")
        raise InfeasibleAssignmentError(INFEASIBLE_MESSAGE)

    known = set(nodes)
    candidates = [
        (giver, recipient)
        for giver, recipient in arcs
        if giver != recipient and giver in known and recipient in known
    ]
    if len(candidates) != len(arcs):
        log.bind(ignored=len(arcs) - len(candidates)).warning(
            "Ignoring self arcs and arcs between unknown participants"
        )

    out_arcs: Dict[str, List[int]] = {node: [] for node in nodes}
    in_arcs: Dict[str, List[int]] = {node: [] for node in nodes}
    for index, (giver, recipient) in enumerate(candidates):
        out_arcs[giver].append(index)
        in_arcs[recipient].append(index)

    stranded = [node for node in nodes if not out_arcs[node] or not in_arcs[node]]
    if stranded:
        log.bind(stranded=len(stranded)).warning("Some participants have no permissible arcs")
        raise InfeasibleAssignmentError(INFEASIBLE_MESSAGE)

    problem = pulp.LpProblem("secret_santa", pulp.LpMinimize)
    problem += pulp.lpSum([])  # feasibility only
    # PuLP orders columns by name; zero-padded indices keep the shuffled order.
    x = [pulp.LpVariable(f"x_{index:06d}", cat=pulp.LpBinary) for index in range(len(candidates))]

    for position, node in enumerate(nodes):
        problem += pulp.lpSum(x[index] for index in out_arcs[node]) == 1, f"out_flow_{position}"
        problem += pulp.lpSum(x[index] for index in in_arcs[node]) == 1, f"in_flow_{position}"

    problem.solve(pulp.PULP_CBC_CMD(msg=False))
    status = pulp.LpStatus[problem.status]
    log.debug("Solver finished with status {status}", status=status)

    if problem.status != pulp.LpStatusOptimal:
        raise InfeasibleAssignmentError(INFEASIBLE_MESSAGE)

    selected = [
        arc
        for arc, variable in zip(candidates, x)
        if variable.varValue is not None and variable.varValue >= 0.5
    ]
    if not _is_valid(selected, nodes):
        log.error("Solver reported {status} but the selection breaks degree constraints", status=status)
        raise InfeasibleAssignmentError(INFEASIBLE_MESSAGE)

    log.info("Assignment found")
    return selected


def assignment_cycles(assignment: Sequence[Arc]) -> List[List[str]]:
    """Split a valid assignment into its disjoint giving cycles."""
    successor = dict(assignment)
    cycles: List[List[str]] = []
    visited = set()
    for start, _ in assignment:
        if start in visited:
            continue
        cycle = []
        node = start
        while node not in visited:
            visited.add(node)
            cycle.append(node)
            node = successor[node]
        cycles.append(cycle)
    return cycles
