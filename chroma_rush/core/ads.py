"""
Ad Broker
=========

Platform ad SDKs behind one interface.

The game only ever talks to an AdBroker. Which variant is used is decided
once at startup by `detect_ad_broker`, which probes a namespace (normally
the host's globals) for a known SDK object.

Every SDK call is deferred to the FrameScheduler, so nothing an SDK does can
run inside a simulation tick, and every SDK exception is caught and turned
into a declined/error outcome. Continuations never receive game state;
callers must not use them to mutate the simulation.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from chroma_rush.core.config_loader import GameConfig, get_config
from chroma_rush.core.scheduler import FrameScheduler

logger = logging.getLogger(__name__)


class AdOutcome(str, Enum):
    GRANTED = "granted"
    DECLINED = "declined"
    ERROR = "error"


RewardCallback = Callable[[], None]
FailureCallback = Callable[[AdOutcome], None]


class AdBroker:
    """
    Base broker: standalone play with no SDK.

    Rewarded ads are auto-granted after a short delay so flows that depend
    on them can be exercised without a platform.
    """

    platform = "standalone"

    def __init__(
        self,
        scheduler: FrameScheduler,
        config: Optional[GameConfig] = None
    ):
        if config is None:
            config = get_config()

        self._config = config
        self._scheduler = scheduler
        self.last_outcome: Optional[AdOutcome] = None

    def init(self) -> str:
        """Initialize the platform SDK. Returns the platform id."""
        logger.info("Standalone mode (no ad SDK)")
        return self.platform

    def notify_gameplay_start(self) -> None:
        pass

    def notify_gameplay_stop(self) -> None:
        pass

    def request_interstitial_ad(self) -> None:
        pass

    def request_rewarded_ad(
        self,
        on_reward: RewardCallback,
        on_error: FailureCallback
    ) -> None:
        """
        Ask for a rewarded ad. Exactly one of the continuations runs later.

        Args:
            on_reward: Called when the reward is granted.
            on_error: Called with DECLINED or ERROR otherwise.
        """
        logger.debug("No SDK - auto-granting reward")
        self._scheduler.call_later(
            self._config.ads.rewarded_fallback_delay_sec,
            self._finish, AdOutcome.GRANTED, on_reward, on_error
        )

    def _finish(
        self,
        outcome: AdOutcome,
        on_reward: RewardCallback,
        on_error: FailureCallback
    ) -> None:
        self.last_outcome = outcome
        if outcome is AdOutcome.GRANTED:
            on_reward()
        else:
            on_error(outcome)


class NullAdBroker(AdBroker):
    """Explicit name for the no-SDK variant."""


class _SdkAdBroker(AdBroker):
    """Shared plumbing for brokers that wrap a platform SDK object."""

    def __init__(
        self,
        sdk: Any,
        scheduler: FrameScheduler,
        config: Optional[GameConfig] = None
    ):
        super().__init__(scheduler, config)
        self._sdk = sdk

    @property
    def sdk(self) -> Any:
        return self._sdk

    def _dispatch(self, label: str, fn: Callable[..., Any], *args: Any) -> None:
        """Run an SDK call on the next scheduler drain, swallowing its failures."""
        self._scheduler.call_soon(self._guarded, label, fn, args)

    def _guarded(self, label: str, fn: Callable[..., Any], args: tuple) -> None:
        try:
            fn(*args)
        except Exception as e:
            logger.warning("%s %s failed: %s", self.platform, label, e)

    def request_rewarded_ad(
        self,
        on_reward: RewardCallback,
        on_error: FailureCallback
    ) -> None:
        logger.debug("Requesting rewarded ad from %s", self.platform)
        self._scheduler.call_soon(self._run_rewarded, on_reward, on_error)

    def _run_rewarded(self, on_reward: RewardCallback, on_error: FailureCallback) -> None:
        try:
            self._show_rewarded(on_reward, on_error)
        except Exception as e:
            logger.warning("%s rewarded ad failed: %s", self.platform, e)
            self._finish(AdOutcome.ERROR, on_reward, on_error)

    def _show_rewarded(self, on_reward: RewardCallback, on_error: FailureCallback) -> None:
        raise NotImplementedError


class PokiAdBroker(_SdkAdBroker):
    """Poki SDK: gameplay notifications, rewarded and commercial breaks."""

    platform = "poki"

    def init(self) -> str:
        self._sdk.init()
        self._sdk.game_loading_finished()
        logger.info("Poki SDK initialized")
        return self.platform

    def notify_gameplay_start(self) -> None:
        self._dispatch("gameplay_start", self._sdk.gameplay_start)

    def notify_gameplay_stop(self) -> None:
        self._dispatch("gameplay_stop", self._sdk.gameplay_stop)

    def request_interstitial_ad(self) -> None:
        self._dispatch("commercial_break", self._sdk.commercial_break)

    def _show_rewarded(self, on_reward: RewardCallback, on_error: FailureCallback) -> None:
        granted = bool(self._sdk.rewarded_break())
        outcome = AdOutcome.GRANTED if granted else AdOutcome.DECLINED
        self._finish(outcome, on_reward, on_error)


class CrazyGamesAdBroker(_SdkAdBroker):
    """CrazyGames SDK: callback-style ad requests under `sdk.ad`."""

    platform = "crazygames"

    def init(self) -> str:
        self._sdk.init()
        logger.info("CrazyGames SDK initialized")
        return self.platform

    def notify_gameplay_start(self) -> None:
        self._dispatch("gameplay_start", self._sdk.game.gameplay_start)

    def notify_gameplay_stop(self) -> None:
        self._dispatch("gameplay_stop", self._sdk.game.gameplay_stop)

    def request_interstitial_ad(self) -> None:
        self._dispatch("midgame ad", self._sdk.ad.request_ad, "midgame")

    def _show_rewarded(self, on_reward: RewardCallback, on_error: FailureCallback) -> None:
        self._sdk.ad.request_ad(
            "rewarded",
            ad_finished=lambda: self._finish(AdOutcome.GRANTED, on_reward, on_error),
            ad_error=lambda *_: self._finish(AdOutcome.ERROR, on_reward, on_error),
            ad_started=lambda: logger.debug("Ad started"),
        )


class GameDistributionAdBroker(_SdkAdBroker):
    """
    GameDistribution SDK: only rewarded ads are wired.

    `show_ad` raises when the ad is not shown, which counts as an error.
    """

    platform = "gamedistribution"

    def init(self) -> str:
        logger.info("GameDistribution SDK initialized")
        return self.platform

    def _show_rewarded(self, on_reward: RewardCallback, on_error: FailureCallback) -> None:
        self._sdk.show_ad("rewarded")
        self._finish(AdOutcome.GRANTED, on_reward, on_error)


def _crazygames_sdk(obj: Any) -> Any:
    # The global is a namespace object exposing the SDK as `.SDK`
    return getattr(obj, "SDK", obj)


# Probe order matters: the first SDK found wins
_PROBES = (
    ("PokiSDK", PokiAdBroker, lambda obj: obj),
    ("CrazyGames", CrazyGamesAdBroker, _crazygames_sdk),
    ("gdsdk", GameDistributionAdBroker, lambda obj: obj),
)


def detect_ad_broker(
    namespace: Optional[Mapping[str, Any]],
    scheduler: FrameScheduler,
    config: Optional[GameConfig] = None
) -> AdBroker:
    """
    Select and initialize the ad broker for this host.

    Args:
        namespace: Mapping to probe for SDK objects (e.g. host globals).
        scheduler: Scheduler the broker defers SDK work to.
        config: Game configuration. Uses default if None.

    Returns:
        An initialized broker. Falls back to NullAdBroker when no SDK is
        present or the SDK fails to initialize.
    """
    namespace = namespace or {}
    for name, broker_cls, unwrap in _PROBES:
        obj = namespace.get(name)
        if obj is None:
            continue
        broker = broker_cls(unwrap(obj), scheduler, config)
        try:
            broker.init()
        except Exception as e:
            logger.warning("%s SDK init failed, falling back to standalone: %s", name, e)
            break
        return broker

    broker = NullAdBroker(scheduler, config)
    broker.init()
    return broker
