"""HelixIntel - home maintenance schedules, tasks and analytics."""

__version__ = "0.1.0"
