"""Background resolution of users referenced by rendered panes."""

from __future__ import annotations

from typing import Any, Iterable

from loguru import logger

from slack_panes.core.cache import DomainCache
from slack_panes.core.models import User
from slack_panes.net.gateway import SlackGateway


class UserResolver:
    """Fetch uncached users once, write them to the cache on arrival.

    The cache emits ``cache:user_updated`` for every stored user; panes
    listen for that and re-render, so the resolver itself never renders.
    """

    def __init__(self, cache: DomainCache, gateway: SlackGateway) -> None:
        self.cache = cache
        self.gateway = gateway
        self.in_flight: set[str] = set()
        self.failed: set[str] = set()

    def request(self, user_ids: Iterable[str]) -> None:
        for user_id in sorted(set(user_ids)):
            if not user_id or user_id in self.in_flight or user_id in self.failed:
                continue
            if self.cache.get_user_by_id(user_id) is not None:
                continue
            self.in_flight.add(user_id)
            logger.debug("Resolving user {}", user_id)
            self.gateway.fetch_user_by_id(user_id, self._on_result(user_id))

    def _on_result(self, user_id: str):
        def _done(success: bool, payload: Any) -> None:
            self.in_flight.discard(user_id)
            if not success or not isinstance(payload, User):
                self.failed.add(user_id)
                logger.debug("User {} could not be resolved: {}", user_id, payload)
                return
            self.cache.set_user_cache(user_id, payload)

        return _done

    def forget_failures(self) -> None:
        """Allow previously failed ids to be fetched again."""
        self.failed.clear()

    def reset(self) -> None:
        self.in_flight.clear()
        self.failed.clear()
