"""Tests for the session domain cache."""

from slack_panes.core.cache import DomainCache, UIPreferences
from slack_panes.core.events import USER_UPDATED, EventBus
from slack_panes.core.models import Message, ThreadRef, User
from tests.factories import make_channel, make_message


class TestDomainCache:
    def test_messages_absent_until_fetched(self, cache):
        assert cache.get_messages("C1") is None

        cache.set_messages("C1", [])
        assert cache.get_messages("C1") == []

    def test_returned_lists_are_copies(self, cache):
        cache.set_messages("C1", [make_message("C1", "1.0")])
        cache.get_messages("C1").clear()

        assert len(cache.get_messages("C1")) == 1

    def test_set_user_emits_update(self):
        bus = EventBus()
        cache = DomainCache(bus)
        seen = []
        bus.on(USER_UPDATED, lambda uid, user: seen.append((uid, user.label)))

        cache.set_user_cache("U1", User(id="U1", display_name="alice"))

        assert seen == [("U1", "alice")]
        assert cache.get_user_by_id("U1").label == "alice"

    def test_current_channel_name_defaults_to_id(self, cache):
        cache.set_current_channel("C9")
        assert cache.get_current_channel().name == "C9"

    def test_find_channel_by_name_or_id(self, cache):
        cache.set_channels([make_channel("C1", "general")])

        assert cache.find_channel_by_name("#general").id == "C1"
        assert cache.find_channel_by_name("C1").id == "C1"
        assert cache.find_channel_by_name("missing") is None

    def test_remove_custom_section_drops_assignments(self, cache):
        cache.add_custom_section("custom:work", "Work")
        cache.set_channel_section("C1", "custom:work")
        cache.set_section_collapsed("custom:work", True)

        cache.remove_custom_section("custom:work")

        prefs = cache.preferences()
        assert prefs.sections == {}
        assert prefs.channel_sections == {}
        assert "custom:work" not in prefs.collapsed

    def test_reset_keeps_preferences(self, cache):
        cache.set_channels([make_channel("C1", "general")])
        cache.set_starred("C1", True)
        cache.set_current_channel("C1", "general")
        cache.set_user_cache("U1", User(id="U1"))

        cache.reset()

        assert not cache.channels_loaded()
        assert cache.get_current_channel() is None
        assert cache.get_user_by_id("U1") is None
        assert cache.is_starred("C1")

    def test_preferences_snapshot_is_detached(self, cache):
        snapshot = cache.preferences()
        snapshot.starred.add("C1")

        assert not cache.is_starred("C1")


def test_constructor_copies_preferences():
    prefs = UIPreferences(starred={"C1"})
    cache = DomainCache(EventBus(), prefs)
    prefs.starred.clear()

    assert cache.is_starred("C1")


def test_messages_with_blocks_are_hashable():
    payload = {"ts": "1.0", "user": "U1", "blocks": [{"type": "rich_text", "elements": []}]}
    message = Message.from_api(payload, "C1")
    ref = ThreadRef(ts="1.0", parent=message)

    assert message.blocks == ({"type": "rich_text", "elements": []},)
    assert len({message, Message.from_api(payload, "C1")}) == 1
    assert hash(ref) == hash(ThreadRef(ts="1.0", parent=message))
