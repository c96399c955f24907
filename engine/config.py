"""
Tactics configuration: tunable AI thresholds with JSON save/load.
"""

import json
from pathlib import Path
from typing import Dict, Any

from settings import (
    VULNERABILITY_THRESHOLD,
    CLUSTER_GAIN_THRESHOLD,
    MAX_TACTICAL_DETOUR,
    LEADER_FOLLOW_MIN_GROUP,
)
from engine.error_handler import ConfigError, log_error


class TacticsConfig:
    """Runtime knobs for the decision engine."""

    def __init__(self) -> None:
        self.vulnerability_threshold: int = VULNERABILITY_THRESHOLD
        self.cluster_gain_threshold: float = CLUSTER_GAIN_THRESHOLD
        self.max_tactical_detour: int = MAX_TACTICAL_DETOUR
        self.tactics_enabled: bool = True
        # Followers path toward the first actor instead of the player
        self.leader_follow_enabled: bool = False
        self.leader_follow_min_group: int = LEADER_FOLLOW_MIN_GROUP

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for saving."""
        return {
            "vulnerability_threshold": self.vulnerability_threshold,
            "cluster_gain_threshold": self.cluster_gain_threshold,
            "max_tactical_detour": self.max_tactical_detour,
            "tactics_enabled": self.tactics_enabled,
            "leader_follow_enabled": self.leader_follow_enabled,
            "leader_follow_min_group": self.leader_follow_min_group,
        }

    def from_dict(self, data: Dict[str, Any]) -> None:
        """
        Load config from dictionary.

        Missing keys keep their defaults. Raises ConfigError on values
        the engine cannot work with.
        """
        threshold = data.get("vulnerability_threshold", VULNERABILITY_THRESHOLD)
        gain = data.get("cluster_gain_threshold", CLUSTER_GAIN_THRESHOLD)
        detour = data.get("max_tactical_detour", MAX_TACTICAL_DETOUR)
        min_group = data.get("leader_follow_min_group", LEADER_FOLLOW_MIN_GROUP)

        for name, value in (
            ("vulnerability_threshold", threshold),
            ("max_tactical_detour", detour),
            ("leader_follow_min_group", min_group),
        ):
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(
                    f"{name} must be a non-negative integer, got {value!r}",
                    user_message="Invalid tactics settings.",
                )
        if isinstance(gain, bool) or not isinstance(gain, (int, float)):
            raise ConfigError(
                f"cluster_gain_threshold must be a number, got {gain!r}",
                user_message="Invalid tactics settings.",
            )

        self.vulnerability_threshold = threshold
        self.cluster_gain_threshold = float(gain)
        self.max_tactical_detour = detour
        self.tactics_enabled = bool(data.get("tactics_enabled", True))
        self.leader_follow_enabled = bool(data.get("leader_follow_enabled", False))
        self.leader_follow_min_group = min_group

    def save(self, path: Path) -> bool:
        """Save config to a JSON file."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
            return True
        except OSError as e:
            log_error(e, "TacticsConfig.save")
            return False

    def load(self, path: Path) -> bool:
        """
        Load config from a JSON file.

        Returns False when the file does not exist or cannot be read.
        Invalid values still raise ConfigError.
        """
        if not path.exists():
            return False

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log_error(e, "TacticsConfig.load")
            return False
        self.from_dict(data)
        return True


# Global config instance
_config = TacticsConfig()


def get_config() -> TacticsConfig:
    """Get the global config instance."""
    return _config
