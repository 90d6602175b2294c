"""airsync: discover Claude Code plugins in npm dependencies and sync them into settings.json."""

__version__ = "2.0.0"
