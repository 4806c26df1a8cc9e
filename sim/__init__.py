"""Simulated visual-programming host."""

from .sim import ISim, Sim

__all__ = ["ISim", "Sim"]
