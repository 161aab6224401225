"""
Тесты для ScoreboardSync

Проверяет:
1. Стабильную сортировку по score (без вторичного ключа)
2. Floor at 0 для score и territory_count
3. reconcile_from_remote: полная перезапись, фильтр, дедупликация
4. Monotonicity guard строки локального игрока
5. check_consistency / rebuild против TerritoryStore
"""

import math

import pytest

from turfwar.core.domain import Coordinate, LeaderboardEntry, Player
from turfwar.scoreboard import LeaderboardConfig, ScoreboardSync
from turfwar.territory import TerritoryStore

ORIGIN = Coordinate(latitude=43.6150, longitude=-116.2023)


class FakeClock:
    def __init__(self, start: int = 1_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1000) -> None:
        self.now += ms


def square(side_m: float, north_m: float = 0.0) -> list[Coordinate]:
    def at(n: float, e: float) -> Coordinate:
        d_lat = math.degrees(n / 6_371_000.0)
        d_lon = math.degrees(e / (6_371_000.0 * math.cos(math.radians(ORIGIN.latitude))))
        return Coordinate(latitude=ORIGIN.latitude + d_lat, longitude=ORIGIN.longitude + d_lon)

    sw = at(north_m, 0)
    return [sw, at(north_m, side_m), at(north_m + side_m, side_m), at(north_m + side_m, 0), sw]


def row(player_id: str, score: int, ts: int = 0, count: int = 0, name: str = "") -> dict:
    return {
        "id": player_id,
        "display_name": name or player_id.title(),
        "score": score,
        "territory_count": count,
        "updated_ts_utc_ms": ts,
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def board(clock) -> ScoreboardSync:
    return ScoreboardSync(local_player_id="me", clock=clock)


def ids(board: ScoreboardSync) -> list[str]:
    return [r.id for r in board.entries()]


# =============================================================================
# LOCAL DELTAS
# =============================================================================


class TestApplyDelta:
    def test_creates_row(self, board, clock):
        entry = board.apply_delta("alice", 4, 1, display_name="Alice")
        assert entry == LeaderboardEntry(
            id="alice", display_name="Alice", score=4, territory_count=1, updated_ts_utc_ms=clock.now
        )

    def test_sorted_descending(self, board):
        board.apply_delta("a", 5, 1)
        board.apply_delta("b", 9, 1)
        board.apply_delta("c", 7, 1)
        assert ids(board) == ["b", "c", "a"]
        assert board.rank_of("c") == 2
        assert board.rank_of("nobody") is None

    def test_stable_ties(self, board):
        """Равный score: порядок вставки сохраняется."""
        board.apply_delta("first", 5, 1)
        board.apply_delta("second", 5, 1)
        board.apply_delta("third", 5, 1)
        assert ids(board) == ["first", "second", "third"]

    def test_floor_at_zero(self, board):
        board.apply_delta("a", 3, 1)
        entry = board.apply_delta("a", -10, -5)
        assert entry.score == 0
        assert entry.territory_count == 0

    def test_existing_display_name_kept(self, board):
        board.apply_delta("a", 3, 1, display_name="Alice")
        board.apply_delta("a", 3, 1, display_name="Other")
        assert board.get("a").display_name == "Alice"

    def test_local_player_tracked(self, board):
        board.apply_delta("me", 7, 1)
        assert board.last_local_score == 7
        board.apply_delta("other", 3, 1)
        assert board.last_local_score == 7

    def test_rename(self, board):
        board.apply_delta("a", 3, 1, display_name="A")
        assert board.rename("a", "Alpha")
        assert board.get("a").display_name == "Alpha"
        assert not board.rename("missing", "X")


# =============================================================================
# REMOTE RECONCILE
# =============================================================================


class TestReconcile:
    def test_full_overwrite(self, board):
        board.apply_delta("stale", 100, 3)
        board.reconcile_from_remote([row("a", 5, ts=1), row("b", 9, ts=1)])
        assert ids(board) == ["b", "a"]

    def test_entries_accepted(self, board):
        board.reconcile_from_remote([LeaderboardEntry(id="a", display_name="A", score=2)])
        assert board.get("a").score == 2

    def test_stable_ties_from_remote_order(self, board):
        board.reconcile_from_remote([row("x", 5), row("y", 5), row("z", 8)])
        assert ids(board) == ["z", "x", "y"]

    def test_dedupe_newest_wins(self, board):
        result = board.reconcile_from_remote(
            [row("a", 10, ts=5), row("a", 3, ts=9), row("a", 50, ts=1)]
        )
        assert board.get("a").score == 3
        assert result.duplicates_dropped == 2
        assert result.rows_total == 1

    def test_dedupe_tie_later_row_wins(self, board):
        board.reconcile_from_remote([row("a", 10, ts=5), row("a", 12, ts=5)])
        assert board.get("a").score == 12

    @pytest.mark.parametrize(
        "hidden",
        [
            row("guestUser", 50),
            row("p1", 50, name="Test Player"),
            row("p2", 50, name="QA TESTER"),
            row("dev-account", 50),
            row("someone@example.com", 50),
        ],
    )
    def test_hidden_accounts_filtered(self, board, hidden):
        result = board.reconcile_from_remote([hidden, row("real", 1)])
        assert ids(board) == ["real"]
        assert result.rows_hidden == 1

    def test_filter_disabled(self, clock):
        board = ScoreboardSync(config=LeaderboardConfig(hide_accounts=False), clock=clock)
        board.reconcile_from_remote([row("guestUser", 5)])
        assert ids(board) == ["guestUser"]


class TestMonotonicityGuard:
    """Устаревший remote не откатывает строку локального игрока."""

    @pytest.fixture
    def local_at_10(self, board, clock):
        clock.now = 5_000
        board.apply_delta("me", 10, 1, display_name="Me")
        return board

    def test_stale_lower_with_equal_ts_protected(self, local_at_10):
        result = local_at_10.reconcile_from_remote([row("me", 6, ts=5_000)])
        assert result.local_row_protected
        assert local_at_10.get("me").score == 10

    def test_stale_lower_with_older_ts_protected(self, local_at_10):
        local_at_10.reconcile_from_remote([row("me", 6, ts=4_000), row("b", 2, ts=4_000)])
        assert local_at_10.get("me").score == 10
        assert ids(local_at_10) == ["me", "b"]

    def test_strictly_newer_lower_accepted(self, local_at_10):
        """Legitimate loss (атака прошла на другом устройстве)."""
        result = local_at_10.reconcile_from_remote([row("me", 6, ts=5_001)])
        assert not result.local_row_protected
        assert local_at_10.get("me").score == 6
        assert local_at_10.last_local_score == 6

    def test_higher_remote_accepted(self, local_at_10):
        local_at_10.reconcile_from_remote([row("me", 14, ts=1)])
        assert local_at_10.get("me").score == 14
        assert local_at_10.last_local_score == 14

    def test_missing_local_row_reinserted(self, local_at_10):
        result = local_at_10.reconcile_from_remote([row("b", 20, ts=9_000)])
        assert result.local_row_protected
        assert ids(local_at_10) == ["b", "me"]
        assert local_at_10.get("me").score == 10

    def test_no_local_writes_no_guard(self, board):
        result = board.reconcile_from_remote([row("me", 3, ts=0)])
        assert not result.local_row_protected
        assert board.get("me").score == 3

    def test_identity_change_resets_guard(self, local_at_10):
        local_at_10.set_local_player("someone-else")
        assert local_at_10.last_local_score is None
        local_at_10.reconcile_from_remote([row("me", 1, ts=0)])
        assert local_at_10.get("me").score == 1

    def test_guard_survives_repeated_stale_snapshots(self, local_at_10):
        for _ in range(3):
            local_at_10.reconcile_from_remote([row("me", 6, ts=4_000)])
        assert local_at_10.get("me").score == 10

    def test_out_of_order_snapshots_do_not_rewind_baseline(self, local_at_10):
        """Принятая устаревшая строка (10, ts=1) не сдвигает baseline назад."""
        first = local_at_10.reconcile_from_remote([row("me", 10, ts=1)])
        second = local_at_10.reconcile_from_remote([row("me", 3, ts=2)])

        assert not first.local_row_protected
        assert second.local_row_protected
        assert local_at_10.get("me").score == 10
        assert local_at_10.last_local_score == 10

    def test_stale_higher_row_raises_baseline(self, local_at_10):
        local_at_10.reconcile_from_remote([row("me", 14, ts=1)])
        local_at_10.reconcile_from_remote([row("me", 12, ts=2)])
        assert local_at_10.get("me").score == 14

    def test_newer_row_after_stale_accepted(self, local_at_10):
        local_at_10.reconcile_from_remote([row("me", 10, ts=1)])
        local_at_10.reconcile_from_remote([row("me", 3, ts=6_000)])
        assert local_at_10.get("me").score == 3
        assert local_at_10.last_local_score == 3


# =============================================================================
# CONSISTENCY
# =============================================================================


class TestConsistency:
    @pytest.fixture
    def store(self, clock) -> TerritoryStore:
        return TerritoryStore(clock=clock)

    def test_incremental_matches_recompute(self, board, store):
        me = Player(id="me", display_name="Me")
        t = store.add_territory(square(20), me)
        board.apply_delta("me", t.score_value, 1)
        me = me.with_score(t.score_value)

        report = board.check_consistency(store, me)

        assert report.consistent
        assert report.issues == ()

    def test_detects_count_drift(self, board, store):
        me = Player(id="me", display_name="Me")
        store.add_territory(square(20), me)
        board.apply_delta("me", 0, 2)

        report = board.check_consistency(store)

        assert not report.consistent
        (issue,) = report.issues
        assert (issue.player_id, issue.field, issue.leaderboard_value, issue.expected_value) == (
            "me",
            "territory_count",
            2,
            1,
        )

    def test_detects_missing_owner_row(self, board, store):
        store.add_territory(square(20), Player(id="ghost", display_name="G"))
        report = board.check_consistency(store)
        assert [i.player_id for i in report.issues] == ["ghost"]
        assert report.issues[0].leaderboard_value is None

    def test_detects_score_drift(self, board, store):
        board.apply_delta("me", 5, 0)
        report = board.check_consistency(store, Player(id="me", display_name="Me", score=9))
        assert [(i.field, i.leaderboard_value, i.expected_value) for i in report.issues] == [
            ("score", 5, 9)
        ]

    def test_rebuild_restores_consistency(self, board, store):
        me = Player(id="me", display_name="Me", score=8)
        store.add_territory(square(20), me)
        store.add_territory(square(20, north_m=100), Player(id="bob", display_name="Bob"))
        board.apply_delta("me", 1, 5)
        board.apply_delta("bob", 3, 0, display_name="Bob")

        rows = board.rebuild(store, [me])

        assert [(r.id, r.score, r.territory_count) for r in rows] == [
            ("me", 8, 1),
            ("bob", 3, 1),
        ]
        assert board.check_consistency(store, me).consistent
        assert board.last_local_score == 8


class TestLoadClear:
    def test_load_sorts_and_tracks_local(self, board):
        board.load([row("a", 2, ts=1), row("me", 5, ts=3)])
        assert ids(board) == ["me", "a"]
        assert board.last_local_score == 5

    def test_clear(self, board):
        board.apply_delta("me", 5, 1)
        board.clear()
        assert board.entries() == []
        assert board.last_local_score is None
