"""Mint events API: event, run and leaderboard service for the Mint simulation platform."""

__version__ = "0.1.0"
