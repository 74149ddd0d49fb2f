"""
Tutoring schedule core: secure session storage and lesson reminders.
"""

from .app import ScheduleCore, bootstrap

__version__ = "0.1.0"

__all__ = ["ScheduleCore", "bootstrap", "__version__"]
