"""gitreport - daily and weekly activity reports from git history."""

__version__ = "1.0.0"
