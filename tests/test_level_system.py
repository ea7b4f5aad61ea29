"""
Tests for the level progression curve
"""

import pytest

from wordchain.level_system import (
    LEVEL_TABLE,
    MAX_LEVEL,
    LevelSystem,
    get_level_info,
    get_level_system,
    get_total_exp_for_level,
)


class TestLevelSystem:
    """Test LevelSystem class"""

    @pytest.fixture
    def level_system(self):
        return LevelSystem()

    def test_zero_experience_is_level_one(self, level_system):
        info = level_system.get_level_info(0)

        assert info.current_level == 1
        assert info.progress_to_next_level == 0.0
        assert info.exp_for_current_level == 0
        assert info.exp_for_next_level == 100
        assert info.title == "새싹"

    def test_negative_experience_is_treated_as_zero(self, level_system):
        info = level_system.get_level_info(-50)

        assert info.current_level == 1
        assert info.current_exp == 0
        assert info.progress_to_next_level == 0.0

    def test_level_ten_threshold(self, level_system):
        info = level_system.get_level_info(2190)

        assert info.current_level == 10
        assert info.progress_to_next_level == 0.0
        assert info.exp_for_next_level == 2640
        assert info.title == "초보자"

    def test_progress_within_level(self, level_system):
        info = level_system.get_level_info(2300)

        assert info.current_level == 10
        assert info.progress_to_next_level == pytest.approx(110 / 450)
        assert info.progress_to_next_level == pytest.approx(0.244, abs=1e-3)

    def test_one_below_threshold_stays_on_previous_level(self, level_system):
        assert level_system.get_level_from_exp(99) == 1
        assert level_system.get_level_from_exp(100) == 2
        assert level_system.get_level_from_exp(2639) == 10
        assert level_system.get_level_from_exp(2640) == 11

    def test_interpolated_thresholds(self, level_system):
        # 11: 2640 and 15: 4940 -> 575 per level
        assert level_system.get_total_exp_for_level(12) == 3215
        assert level_system.get_total_exp_for_level(13) == 3790
        assert level_system.get_total_exp_for_level(14) == 4365

    def test_known_levels_match_table(self, level_system):
        for level, experience in LEVEL_TABLE.items():
            assert level_system.get_total_exp_for_level(level) == experience

    def test_thresholds_are_monotonic(self, level_system):
        thresholds = [
            level_system.get_total_exp_for_level(level) for level in range(1, MAX_LEVEL + 1)
        ]
        assert thresholds == sorted(thresholds)
        assert len(set(thresholds)) == len(thresholds)

    def test_threshold_reaches_at_least_its_level(self, level_system):
        for level in range(1, MAX_LEVEL + 1):
            threshold = level_system.get_total_exp_for_level(level)
            assert level_system.get_level_info(threshold).current_level >= level

    def test_level_is_monotonic_and_bounded(self, level_system):
        previous = 1
        for experience in range(0, 310000, 997):
            level = level_system.get_level_from_exp(experience)
            assert 1 <= level <= MAX_LEVEL
            assert level >= previous
            previous = level

    def test_out_of_range_levels_are_clamped(self, level_system):
        assert level_system.get_total_exp_for_level(0) == 0
        assert level_system.get_total_exp_for_level(-3) == 0
        assert level_system.get_total_exp_for_level(150) == 296740

    def test_max_level(self, level_system):
        info = level_system.get_level_info(1_000_000)

        assert info.current_level == MAX_LEVEL
        assert info.is_max_level
        assert info.progress_to_next_level == 1.0
        assert info.title == "마스터"

    @pytest.mark.parametrize(
        "level,title",
        [
            (1, "새싹"),
            (5, "새싹"),
            (6, "초보자"),
            (15, "초보자"),
            (16, "견습생"),
            (31, "숙련자"),
            (51, "전문가"),
            (71, "대가"),
            (86, "마스터"),
            (100, "마스터"),
            (101, "최고 마스터"),
        ],
    )
    def test_titles(self, level_system, level, title):
        assert level_system.get_title_for_level(level) == title

    def test_level_requirement(self, level_system):
        requirement = level_system.get_level_requirement(11)

        assert requirement.total_experience_needed == 2640
        assert requirement.experience_from_previous_level == 450
        assert requirement.title == "초보자"
        assert level_system.get_level_requirement(1).experience_from_previous_level == 0


class TestConvenienceFunctions:
    """Test module level helpers"""

    def test_global_instance(self):
        assert get_level_system() is get_level_system()

    def test_get_level_info(self):
        assert get_level_info(590).current_level == 5

    def test_get_total_exp_for_level(self):
        assert get_total_exp_for_level(20) == 8940
