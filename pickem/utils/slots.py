"""
Pick slot classification

A game's slot depends only on the local weekday of its kickoff: Thursday
night and Monday night games have their own slots, everything else is a
flex game.
"""

import enum

from pickem.utils.timezone_utils import convert_to_app_timezone

# datetime.weekday() numbering
MONDAY_WEEKDAY = 0
THURSDAY_WEEKDAY = 3


class Slot(str, enum.Enum):
    THURSDAY = "THURSDAY"
    MONDAY = "MONDAY"
    FLEX = "FLEX"


def classify_slot(kickoff, tz=None):
    """
    Map a kickoff instant to its pick slot.

    Args:
        kickoff: Kickoff datetime (naive values are read as UTC)
        tz: Timezone name or tzinfo for the local weekday (default: app timezone)

    Returns:
        Slot
    """
    weekday = convert_to_app_timezone(kickoff, tz).weekday()

    if weekday == THURSDAY_WEEKDAY:
        return Slot.THURSDAY
    if weekday == MONDAY_WEEKDAY:
        return Slot.MONDAY
    return Slot.FLEX
