"""Pregnancy tracker data service with invite-code sharing."""

__version__ = "0.1.0"
