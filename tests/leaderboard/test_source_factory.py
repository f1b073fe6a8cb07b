from src.performance_tracker.performance_tracker.core.enums import SourceMode, SourceTier
from src.performance_tracker.performance_tracker.leaderboard.factory import LeaderboardSourceFactory


def test_auto_mode_falls_back_in_order():
    tiers = [s.tier for s in LeaderboardSourceFactory().for_mode(SourceMode.AUTO)]
    assert tiers == [SourceTier.APPROVED, SourceTier.SUBMITTED, SourceTier.HISTORICAL]


def test_explicit_modes_have_no_fallback():
    factory = LeaderboardSourceFactory()
    assert [s.tier for s in factory.for_mode(SourceMode.APPROVED)] == [SourceTier.APPROVED]
    assert [s.tier for s in factory.for_mode(SourceMode.SUBMITTED)] == [SourceTier.SUBMITTED]
