from santa.core.errors import (
    ConfigurationError,
    InfeasibleAssignmentError,
    NotificationError,
    SantaError,
)
from santa.services.arcs import build_arcs
from santa.services.draw import draw, run
from santa.services.solver import solve_assignment

__all__ = [
    "ConfigurationError",
    "InfeasibleAssignmentError",
    "NotificationError",
    "SantaError",
    "build_arcs",
    "draw",
    "run",
    "solve_assignment",
]
