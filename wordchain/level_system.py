"""
Level progression curve: experience to level, title and progress
"""

import logging
from bisect import bisect_right
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MAX_LEVEL = 100

# Cumulative experience required to reach a level. Levels missing from the
# table are interpolated linearly between the nearest known neighbours.
LEVEL_TABLE: dict[int, int] = {
    1: 0, 2: 100, 3: 230, 4: 390, 5: 590,
    6: 830, 7: 1110, 8: 1430, 9: 1790, 10: 2190,
    11: 2640, 15: 4940, 20: 8940, 25: 14190, 30: 20690,
    35: 28440, 40: 37440, 45: 47840, 50: 59740, 55: 73140,
    60: 88340, 65: 105540, 70: 124740, 75: 146240, 80: 170240,
    85: 196740, 90: 225740, 95: 258740, 100: 296740,
}

TITLE_BANDS: list[tuple[int, int, str]] = [
    (1, 5, "새싹"),
    (6, 15, "초보자"),
    (16, 30, "견습생"),
    (31, 50, "숙련자"),
    (51, 70, "전문가"),
    (71, 85, "대가"),
    (86, 100, "마스터"),
]
TOP_TITLE = "최고 마스터"


@dataclass
class LevelInfo:
    """Level snapshot derived from a raw experience total"""

    current_level: int
    current_exp: int
    exp_for_current_level: int
    exp_for_next_level: int
    progress_to_next_level: float
    title: str

    @property
    def is_max_level(self) -> bool:
        return self.current_level >= MAX_LEVEL


@dataclass
class LevelRequirement:
    """Experience requirements of a single level"""

    level: int
    total_experience_needed: int
    experience_from_previous_level: int
    title: str


class LevelSystem:
    """Piecewise-linear experience curve over levels 1..100"""

    def __init__(self, level_table: dict[int, int] | None = None):
        self.level_table = dict(level_table or LEVEL_TABLE)
        self._keys = sorted(self.level_table)
        self._max_exp = self.level_table[self._keys[-1]]
        # thresholds[i] is the cumulative experience for level i + 1
        self._thresholds = [
            self.get_total_exp_for_level(level) for level in range(1, MAX_LEVEL + 1)
        ]

    def get_level_info(self, experience: int) -> LevelInfo:
        """Build the level snapshot for an experience total"""
        experience = max(0, experience)
        current_level = self.get_level_from_exp(experience)
        exp_for_current = self.get_total_exp_for_level(current_level)
        exp_for_next = self.get_total_exp_for_level(current_level + 1)

        needed = exp_for_next - exp_for_current
        if needed > 0:
            progress = (experience - exp_for_current) / needed
        else:
            progress = 1.0

        return LevelInfo(
            current_level=current_level,
            current_exp=experience,
            exp_for_current_level=exp_for_current,
            exp_for_next_level=exp_for_next,
            progress_to_next_level=max(0.0, min(1.0, progress)),
            title=self.get_title_for_level(current_level),
        )

    def get_level_from_exp(self, experience: int) -> int:
        """Highest level whose threshold does not exceed the experience"""
        level = bisect_right(self._thresholds, max(0, experience))
        return max(1, min(MAX_LEVEL, level))

    def get_total_exp_for_level(self, level: int) -> int:
        """Cumulative experience required to reach a level"""
        target = max(1, min(level, MAX_LEVEL))

        if target in self.level_table:
            return self.level_table[target]

        lower_key = max((key for key in self._keys if key <= target), default=None)
        upper_key = min((key for key in self._keys if key > target), default=None)
        if lower_key is None or upper_key is None:
            return self._max_exp

        lower_exp = self.level_table[lower_key]
        upper_exp = self.level_table[upper_key]
        ratio = (target - lower_key) / (upper_key - lower_key)
        return lower_exp + int((upper_exp - lower_exp) * ratio)

    def get_title_for_level(self, level: int) -> str:
        for low, high, title in TITLE_BANDS:
            if low <= level <= high:
                return title
        return TOP_TITLE

    def get_level_requirement(self, level: int) -> LevelRequirement:
        """Describe what it takes to reach a level"""
        total = self.get_total_exp_for_level(level)
        from_previous = total - self.get_total_exp_for_level(level - 1) if level > 1 else 0
        return LevelRequirement(
            level=level,
            total_experience_needed=total,
            experience_from_previous_level=from_previous,
            title=self.get_title_for_level(level),
        )


# Global instance
_level_system = None


def get_level_system() -> LevelSystem:
    """Get global level system instance"""
    global _level_system
    if _level_system is None:
        _level_system = LevelSystem()
    return _level_system


def get_level_info(experience: int) -> LevelInfo:
    """Convenience function to compute level info"""
    return get_level_system().get_level_info(experience)


def get_total_exp_for_level(level: int) -> int:
    """Convenience function for the threshold of a level"""
    return get_level_system().get_total_exp_for_level(level)
