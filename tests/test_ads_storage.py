"""
Tests for ad broker selection/fallbacks and high score storage.
"""

import json
from types import SimpleNamespace

import pytest

from chroma_rush.core.ads import (
    AdOutcome,
    CrazyGamesAdBroker,
    GameDistributionAdBroker,
    NullAdBroker,
    PokiAdBroker,
    detect_ad_broker,
)
from chroma_rush.core.config_loader import load_config
from chroma_rush.core.game import GameStateMachine
from chroma_rush.core.scheduler import FrameScheduler
from chroma_rush.core.storage import JsonScoreStore, MemoryScoreStore


class FakeClock:
    def __init__(self):
        self.t = 0.0

    def __call__(self):
        return self.t


class FakePoki:
    def __init__(self, rewarded=True, fail_init=False, fail_calls=False):
        self.calls = []
        self._rewarded = rewarded
        self._fail_init = fail_init
        self._fail_calls = fail_calls

    def _record(self, name):
        self.calls.append(name)
        if self._fail_calls:
            raise RuntimeError(f"{name} blocked")

    def init(self):
        self.calls.append("init")
        if self._fail_init:
            raise RuntimeError("no network")

    def game_loading_finished(self):
        self.calls.append("game_loading_finished")

    def gameplay_start(self):
        self._record("gameplay_start")

    def gameplay_stop(self):
        self._record("gameplay_stop")

    def commercial_break(self):
        self._record("commercial_break")

    def rewarded_break(self):
        self._record("rewarded_break")
        return self._rewarded


class FakeCrazyAd:
    def __init__(self, finish=True):
        self.requests = []
        self._finish = finish

    def request_ad(self, kind, ad_finished=None, ad_error=None, ad_started=None):
        self.requests.append(kind)
        if kind != "rewarded":
            return
        ad_started()
        if self._finish:
            ad_finished()
        else:
            ad_error("adblock")


def _crazy_sdk(finish=True):
    calls = []
    return SimpleNamespace(
        init=lambda: calls.append("init"),
        game=SimpleNamespace(
            gameplay_start=lambda: calls.append("gameplay_start"),
            gameplay_stop=lambda: calls.append("gameplay_stop"),
        ),
        ad=FakeCrazyAd(finish),
        calls=calls,
    )


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return FrameScheduler(now_fn=clock)


class Outcomes:
    """Collects rewarded-ad continuations."""

    def __init__(self):
        self.rewarded = 0
        self.failures = []

    def on_reward(self):
        self.rewarded += 1

    def on_error(self, outcome):
        self.failures.append(outcome)


class TestDetection:
    """Broker selection."""

    def test_no_sdk_is_standalone(self, scheduler, config):
        broker = detect_ad_broker({}, scheduler, config)
        assert isinstance(broker, NullAdBroker)
        assert broker.platform == "standalone"

    def test_none_namespace(self, scheduler, config):
        assert isinstance(detect_ad_broker(None, scheduler, config), NullAdBroker)

    def test_poki_detected_and_initialized(self, scheduler, config):
        sdk = FakePoki()
        broker = detect_ad_broker({"PokiSDK": sdk}, scheduler, config)
        assert isinstance(broker, PokiAdBroker)
        assert sdk.calls == ["init", "game_loading_finished"]

    def test_probe_order(self, scheduler, config):
        namespace = {"gdsdk": object(), "CrazyGames": SimpleNamespace(SDK=_crazy_sdk()), "PokiSDK": FakePoki()}
        assert isinstance(detect_ad_broker(namespace, scheduler, config), PokiAdBroker)
        del namespace["PokiSDK"]
        assert isinstance(detect_ad_broker(namespace, scheduler, config), CrazyGamesAdBroker)
        del namespace["CrazyGames"]
        assert isinstance(detect_ad_broker(namespace, scheduler, config), GameDistributionAdBroker)

    def test_crazygames_sdk_unwrapped(self, scheduler, config):
        sdk = _crazy_sdk()
        broker = detect_ad_broker({"CrazyGames": SimpleNamespace(SDK=sdk)}, scheduler, config)
        assert broker.sdk is sdk
        assert sdk.calls == ["init"]

    def test_failed_init_degrades_to_standalone(self, scheduler, config):
        broker = detect_ad_broker({"PokiSDK": FakePoki(fail_init=True)}, scheduler, config)
        assert isinstance(broker, NullAdBroker)


class TestStandaloneBroker:
    """No-SDK fallbacks."""

    def test_rewarded_auto_granted_after_delay(self, scheduler, clock, config):
        broker = NullAdBroker(scheduler, config)
        outcomes = Outcomes()
        broker.request_rewarded_ad(outcomes.on_reward, outcomes.on_error)
        scheduler.run_due()
        assert outcomes.rewarded == 0
        clock.t = 0.1
        scheduler.run_due()
        assert outcomes.rewarded == 1
        assert broker.last_outcome is AdOutcome.GRANTED

    def test_notifications_are_noops(self, scheduler, config):
        broker = NullAdBroker(scheduler, config)
        broker.notify_gameplay_start()
        broker.notify_gameplay_stop()
        broker.request_interstitial_ad()
        assert scheduler.pending_count == 0


class TestSdkBrokers:
    """Deferred SDK calls and error mapping."""

    def test_calls_deferred_to_scheduler(self, scheduler, config):
        sdk = FakePoki()
        broker = PokiAdBroker(sdk, scheduler, config)
        broker.notify_gameplay_start()
        broker.request_interstitial_ad()
        assert sdk.calls == []
        scheduler.run_due()
        assert sdk.calls == ["gameplay_start", "commercial_break"]

    def test_sdk_exceptions_swallowed(self, scheduler, config):
        sdk = FakePoki(fail_calls=True)
        broker = PokiAdBroker(sdk, scheduler, config)
        broker.notify_gameplay_stop()
        scheduler.run_due()
        assert sdk.calls == ["gameplay_stop"]

    def test_poki_rewarded_declined(self, scheduler, config):
        broker = PokiAdBroker(FakePoki(rewarded=False), scheduler, config)
        outcomes = Outcomes()
        broker.request_rewarded_ad(outcomes.on_reward, outcomes.on_error)
        scheduler.run_due()
        assert outcomes.rewarded == 0
        assert outcomes.failures == [AdOutcome.DECLINED]

    def test_poki_rewarded_error(self, scheduler, config):
        broker = PokiAdBroker(FakePoki(fail_calls=True), scheduler, config)
        outcomes = Outcomes()
        broker.request_rewarded_ad(outcomes.on_reward, outcomes.on_error)
        scheduler.run_due()
        assert outcomes.failures == [AdOutcome.ERROR]

    def test_crazygames_rewarded(self, scheduler, config):
        sdk = _crazy_sdk(finish=True)
        broker = CrazyGamesAdBroker(sdk, scheduler, config)
        outcomes = Outcomes()
        broker.request_rewarded_ad(outcomes.on_reward, outcomes.on_error)
        scheduler.run_due()
        assert outcomes.rewarded == 1
        assert sdk.ad.requests == ["rewarded"]

    def test_crazygames_rewarded_error(self, scheduler, config):
        broker = CrazyGamesAdBroker(_crazy_sdk(finish=False), scheduler, config)
        outcomes = Outcomes()
        broker.request_rewarded_ad(outcomes.on_reward, outcomes.on_error)
        scheduler.run_due()
        assert outcomes.failures == [AdOutcome.ERROR]

    def test_crazygames_interstitial_is_midgame(self, scheduler, config):
        sdk = _crazy_sdk()
        CrazyGamesAdBroker(sdk, scheduler, config).request_interstitial_ad()
        scheduler.run_due()
        assert sdk.ad.requests == ["midgame"]

    def test_gamedistribution_show_ad_failure(self, scheduler, config):
        def show_ad(kind):
            raise RuntimeError("not available")

        broker = GameDistributionAdBroker(SimpleNamespace(show_ad=show_ad), scheduler, config)
        outcomes = Outcomes()
        broker.request_rewarded_ad(outcomes.on_reward, outcomes.on_error)
        scheduler.run_due()
        assert outcomes.failures == [AdOutcome.ERROR]


class TestScoreStores:
    """High score persistence."""

    def test_memory_store(self):
        store = MemoryScoreStore()
        assert store.load() == 0
        store.save(12)
        assert store.load() == 12

    def test_json_missing_file_reads_zero(self, tmp_path, config):
        assert JsonScoreStore(tmp_path / "none.json", config=config).load() == 0

    def test_json_roundtrip_under_key(self, tmp_path, config):
        path = tmp_path / "nested" / "hs.json"
        store = JsonScoreStore(path, config=config)
        store.save(42)
        assert store.load() == 42
        with open(path) as f:
            assert json.load(f) == {"chromaRushHighScore": 42}

    def test_json_keeps_other_keys(self, tmp_path, config):
        path = tmp_path / "hs.json"
        path.write_text(json.dumps({"volume": 3}))
        JsonScoreStore(path, config=config).save(7)
        assert json.loads(path.read_text()) == {"volume": 3, "chromaRushHighScore": 7}

    @pytest.mark.parametrize("content", [
        "not json",
        "[1, 2]",
        '{"chromaRushHighScore": "abc"}',
        '{"chromaRushHighScore": -4}',
        '{"chromaRushHighScore": 1e400}',
        '{"chromaRushHighScore": Infinity}',
        '{"chromaRushHighScore": -Infinity}',
        '{"chromaRushHighScore": NaN}',
    ])
    def test_json_corrupt_reads_zero(self, tmp_path, config, content):
        path = tmp_path / "hs.json"
        path.write_text(content)
        assert JsonScoreStore(path, config=config).load() == 0

    def test_game_starts_over_overflowing_store(self, tmp_path, config):
        path = tmp_path / "hs.json"
        path.write_text('{"chromaRushHighScore": 1e400}')
        game = GameStateMachine(config=config, score_store=JsonScoreStore(path, config=config))
        assert game.high_score == 0

    def test_memory_store_rejects_infinite(self):
        store = MemoryScoreStore(float("inf"))
        assert store.load() == 0
        store.save(float("nan"))
        assert store.load() == 0

    def test_json_numeric_string_accepted(self, tmp_path, config):
        path = tmp_path / "hs.json"
        path.write_text('{"chromaRushHighScore": "15"}')
        assert JsonScoreStore(path, config=config).load() == 15

    def test_json_unwritable_path_does_not_raise(self, tmp_path, config):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        store = JsonScoreStore(blocker / "hs.json", config=config)
        store.save(5)
        assert store.load() == 0
