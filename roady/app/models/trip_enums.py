"""
Trip-related enumerations.
"""

import enum


class TripStatus(str, enum.Enum):
    """Trip lifecycle status. A trip moves from ACTIVE to COMPLETED exactly once."""
    ACTIVE = "active"  # Started, accepting points
    COMPLETED = "completed"  # Stopped, route frozen
