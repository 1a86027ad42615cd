"""
ORM models for the AgroSat API
"""

from .profile import Profile
from .field import Field
from .analysis import Analysis
from .activity import ActivityLog

__all__ = [
    'Profile',
    'Field',
    'Analysis',
    'ActivityLog'
]
