"""QuakeBot: Progle score tracking and Advent of Code leaderboard for Discord."""

__version__ = "1.0.0"
