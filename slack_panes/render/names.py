"""Cache-backed name lookups that record which users a projection depends on."""

from __future__ import annotations

from slack_panes.core.cache import DomainCache
from slack_panes.core.errors import UnresolvedEntity

UNKNOWN_USER = "unknown-user"


class NameLookup:
    """Resolve ids to display text for one projection pass.

    Every user id consulted lands in ``referenced``; ids that were not
    cached also land in ``missing`` so the caller can fetch them.
    """

    def __init__(self, cache: DomainCache) -> None:
        self._cache = cache
        self.referenced: set[str] = set()
        self.missing: set[str] = set()

    def user_label(self, user_id: str) -> str:
        self.referenced.add(user_id)
        user = self._cache.get_user_by_id(user_id)
        if user is None:
            self.missing.add(user_id)
            raise UnresolvedEntity("user", user_id)
        return user.label

    def user_label_or(self, user_id: str, placeholder: str = UNKNOWN_USER) -> str:
        try:
            return self.user_label(user_id)
        except UnresolvedEntity:
            return placeholder

    def channel_name(self, channel_id: str) -> str | None:
        channel = self._cache.get_channel(channel_id)
        return channel.name if channel is not None else None
