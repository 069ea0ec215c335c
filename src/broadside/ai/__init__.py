"""AI package exports."""

from .targeting import HuntKillTargeting, TargetingMode

__all__ = ["HuntKillTargeting", "TargetingMode"]
