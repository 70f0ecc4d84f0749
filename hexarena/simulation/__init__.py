"""Simulation module - fasada SetupSimulator."""

from .setup import SetupSimulator, SetupConfig

__all__ = ["SetupSimulator", "SetupConfig"]
