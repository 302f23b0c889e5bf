from pickem import db  # noqa: F401 - imported for model imports

from .game import Game
from .pick import Pick
from .profile import Profile
from .result import Result

__all__ = [
    "Game",
    "Result",
    "Pick",
    "Profile",
]
