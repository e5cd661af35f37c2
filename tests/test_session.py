"""End-to-end pane behaviour through the in-memory host."""

import json

import pytest

from slack_panes.core.cache import UIPreferences
from slack_panes.core.errors import InvalidPaneState
from slack_panes.core.events import CHANNEL_SELECTED
from slack_panes.core.prefs_store import PrefsStore
from slack_panes.panes.host import MemoryPaneHost
from slack_panes.panes.session import UISession
from tests.factories import FakeGateway, make_channel, make_message


def _pane(host, name):
    handle = host.handle_named(name)
    assert handle is not None, f"{name} pane is not open"
    return handle, host.panes[handle]


def _select(host, channel_text):
    handle, _ = _pane(host, "channels")
    host.cursor_to(handle, channel_text)
    host.press(handle, "enter")


class TestStartup:
    def test_initial_panes(self, session, host):
        _, channels = _pane(host, "channels")
        _, messages = _pane(host, "messages")

        assert channels.title == "Channels"
        assert channels.lines == [
            "▼ Starred",
            "▼ Channels",
            "  # general",
            "  # random",
            "▼ Private Channels",
            "  🔒 secret",
            "▼ Direct Messages",
            "  @ Bob Builder",
        ]
        assert messages.lines == ["No channel selected"]

    def test_loading_placeholder_before_fetch(self, host):
        gateway = FakeGateway(deferred=True)
        UISession(host, gateway).start()

        _, channels = _pane(host, "channels")
        assert channels.lines == ["Loading channels..."]

    def test_default_channel_opens_after_first_fetch(self, host, gateway):
        UISession(host, gateway, default_channel="random").start()

        _, messages = _pane(host, "messages")
        assert messages.title == "Messages: random"
        assert messages.lines[1] == "  elsewhere"

    def test_keymap_overrides(self, host, gateway):
        UISession(host, gateway, keymaps={"channels": {"x": "toggle_star", "s": ""}}).start()

        _, channels = _pane(host, "channels")
        assert channels.keys["x"] == "toggle_star"
        assert "s" not in channels.keys
        assert channels.keys["enter"] == "select"


class TestChannelSelection:
    def test_selecting_channel_emits_event_and_loads_messages(self, session, host, gateway):
        seen = []
        session.bus.on(CHANNEL_SELECTED, lambda cid, name: seen.append((cid, name)))

        _select(host, "# general")

        assert seen == [("C1", "general")]
        handle, messages = _pane(host, "messages")
        assert messages.title == "Messages: general"
        channel_ids = {e.channel_id for e in session.messages.index.entities if e is not None}
        assert channel_ids == {"C1"}
        assert messages.lines[0].startswith("alice (")
        assert "  Thread: 2 replies" in messages.lines

    def test_current_channel_is_highlighted(self, session, host):
        _select(host, "# random")

        _, channels = _pane(host, "channels")
        assert channels.highlighted("current") == [3]

    def test_cursor_highlight_covers_message_block(self, session, host):
        _select(host, "# general")
        handle, messages = _pane(host, "messages")

        host.cursor_to(handle, "  first")

        assert messages.highlighted("cursor") == [0, 1]

    def test_late_response_for_previous_channel_is_not_rendered(self, host):
        gateway = FakeGateway(deferred=True)
        gateway.channels = [make_channel("C1", "general"), make_channel("C2", "random")]
        gateway.messages = {
            "C1": [make_message("C1", "1.0", user=None, username="hook", text="from general")],
            "C2": [make_message("C2", "2.0", user=None, username="hook", text="from random")],
        }
        session = UISession(host, gateway)
        session.start()
        gateway.flush()

        _select(host, "# general")
        _select(host, "# random")
        gateway.flush()

        _, messages = _pane(host, "messages")
        assert "  from random" in messages.lines
        assert "  from general" not in messages.lines
        assert session.cache.get_messages("C1") is not None

    def test_author_resolves_after_fetch(self, host, gateway):
        deferred = FakeGateway(deferred=True)
        deferred.channels = gateway.channels
        deferred.messages = gateway.messages
        deferred.users = gateway.users
        session = UISession(host, deferred)
        session.start()
        deferred.flush()

        session.select_channel("general")
        deferred.queue.popleft()()  # messages only

        _, messages = _pane(host, "messages")
        assert messages.lines[0].startswith("unknown-user (")
        before = list(messages.lines)

        deferred.flush()

        assert messages.lines[0].startswith("alice (")
        assert [i for i, (a, b) in enumerate(zip(before, messages.lines)) if a != b] == [0]

    def test_fetch_failure_notifies_and_keeps_content(self, session, host, gateway):
        gateway.failing.add("load messages")

        _select(host, "# general")

        _, messages = _pane(host, "messages")
        assert messages.lines == ["Loading messages..."]
        assert ("error", "Failed to load messages: boom") in host.notifications

    def test_refresh_retries_failed_user_lookup(self, session, host, gateway):
        gateway.failing.add("load user")
        _select(host, "# general")
        handle, messages = _pane(host, "messages")
        assert messages.lines[0].startswith("unknown-user (")

        host.press(handle, "r")
        assert messages.lines[0].startswith("unknown-user (")

        gateway.failing.clear()
        host.press(handle, "r")

        assert messages.lines[0].startswith("alice (")
        assert gateway.calls.count(("fetch_user_by_id", "U1")) == 3


class TestChannelListActions:
    def test_collapse_and_expand(self, session, host):
        handle, channels = _pane(host, "channels")
        expanded = list(channels.lines)

        host.cursor_to(handle, "▼ Channels")
        host.press(handle, "enter")
        assert channels.lines[1] == "▶ Channels"
        assert "  # general" not in channels.lines
        assert "  🔒 secret" in channels.lines

        host.press(handle, "enter")
        assert channels.lines == expanded

    def test_toggle_section_from_channel_line(self, session, host):
        handle, channels = _pane(host, "channels")

        host.cursor_to(handle, "🔒 secret")
        host.press(handle, "c")

        assert "▶ Private Channels" in channels.lines
        assert "  🔒 secret" not in channels.lines

    def test_star_moves_channel_and_persists(self, host, gateway, tmp_path):
        store = PrefsStore(tmp_path / "prefs.json")
        UISession(host, gateway, prefs_store=store).start()
        handle, channels = _pane(host, "channels")

        host.cursor_to(handle, "# random")
        host.press(handle, "s")

        assert channels.lines[:4] == ["▼ Starred", "  # random", "▼ Channels", "  # general"]
        assert json.loads((tmp_path / "prefs.json").read_text())["starred"] == {"C2": True}

    def test_preferences_survive_a_new_session(self, gateway, tmp_path):
        store = PrefsStore(tmp_path / "prefs.json")
        first_host = MemoryPaneHost()
        first = UISession(first_host, gateway, prefs_store=store)
        first.start()
        handle, _ = _pane(first_host, "channels")
        first_host.cursor_to(handle, "# random")
        first_host.press(handle, "s")
        first.close()

        second_host = MemoryPaneHost()
        UISession(second_host, gateway, prefs_store=store).start()
        _, channels = _pane(second_host, "channels")
        assert channels.lines[1] == "  # random"

    def test_preferences_are_read_when_session_starts(self, host, gateway, tmp_path):
        store = PrefsStore(tmp_path / "prefs.json")
        session = UISession(host, gateway, prefs_store=store)
        store.save(UIPreferences(starred={"C2"}, collapsed={"private": True}))

        session.start()

        _, channels = _pane(host, "channels")
        assert channels.lines[:2] == ["▼ Starred", "  # random"]
        assert "▶ Private Channels" in channels.lines

    def test_move_to_custom_section_and_back(self, session, host):
        handle, channels = _pane(host, "channels")

        host.cursor_to(handle, "# general")
        host.press(handle, "g")
        assert host.prompts[0].prompt.startswith("Move to section")
        host.answer_prompt("Work")

        assert channels.lines[:3] == ["▼ Starred", "▼ Work", "  # general"]
        assert session.cache.custom_sections() == {"custom:work": "Work"}

        host.cursor_to(handle, "# general")
        host.press(handle, "g")
        host.answer_prompt("")

        assert "▼ Work" not in channels.lines
        assert session.cache.custom_sections() == {}

    def test_cancelled_prompt_changes_nothing(self, session, host):
        handle, channels = _pane(host, "channels")
        before = list(channels.lines)

        host.cursor_to(handle, "# general")
        host.press(handle, "g")
        host.answer_prompt(None)

        assert channels.lines == before

    def test_actions_on_blank_or_header_lines_are_noops(self, session, host):
        handle, channels = _pane(host, "channels")
        before = list(channels.lines)

        host.set_cursor(handle, 0)
        host.press(handle, "s")

        assert channels.lines == before


class TestMessageActions:
    def test_send_requires_channel(self, session, host):
        handle, _ = _pane(host, "messages")

        host.press(handle, "m")

        assert host.prompts == []
        assert ("warning", "No channel selected") in host.notifications

    def test_send_message_then_refresh(self, session, host, gateway):
        _select(host, "# general")
        handle, _ = _pane(host, "messages")
        fetches = gateway.count("fetch_messages")

        host.press(handle, "m")
        host.answer_prompt("hi there")

        assert ("send_message", "C1", "hi there") in gateway.sent
        assert gateway.count("fetch_messages") == fetches + 1

    def test_add_reaction_to_message_under_cursor(self, session, host, gateway):
        _select(host, "# general")
        handle, _ = _pane(host, "messages")

        host.cursor_to(handle, "  first")
        host.press(handle, "a")
        host.answer_prompt(":tada:")

        assert ("add_reaction", "C1", "100.000", ":tada:") in gateway.sent


    def test_upload_file_to_current_channel(self, session, host, gateway):
        _select(host, "# general")
        handle, _ = _pane(host, "messages")
        loads = gateway.count("fetch_messages")

        host.press(handle, "u")
        assert host.prompts[-1].prompt == "Upload file to #general: "
        host.answer_prompt(" ~/notes.txt ")

        assert gateway.sent[-1] == ("upload_file", "C1", "~/notes.txt")
        assert ("info", "Uploaded notes.txt") in host.notifications
        assert gateway.count("fetch_messages") == loads + 1


class TestThread:
    def test_open_thread_renders_parent_and_replies(self, session, host):
        _select(host, "# general")
        handle, _ = _pane(host, "messages")

        host.cursor_to(handle, "  second")
        host.press(handle, "enter")

        _, thread = _pane(host, "thread")
        assert thread.title.startswith("Thread: ")
        assert thread.lines[0].startswith("[parent] Bob Builder (")
        assert thread.lines[1] == "  second"
        assert "  reply one" in thread.lines
        assert "  reply two" in thread.lines
        assert session.cache.get_current_thread().ts == "101.000"

    def test_reply_and_close(self, session, host, gateway):
        _select(host, "# general")
        handle, _ = _pane(host, "messages")
        host.cursor_to(handle, "  second")
        host.press(handle, "enter")
        thread_handle, _ = _pane(host, "thread")

        host.press(thread_handle, "m")
        host.answer_prompt("on it")
        assert ("reply_to_thread", "C1", "101.000", "on it") in gateway.sent
        assert gateway.count("fetch_thread_replies") == 2

        host.press(thread_handle, "q")
        assert host.handle_named("thread") is None
        assert thread_handle in host.closed
        assert session.cache.get_current_thread() is None

    def test_new_thread_replaces_old_pane(self, session, host):
        _select(host, "# general")
        handle, _ = _pane(host, "messages")
        host.cursor_to(handle, "  second")
        host.press(handle, "enter")
        first_handle = host.handle_named("thread")

        host.cursor_to(handle, "  first")
        host.press(handle, "enter")

        assert first_handle in host.closed
        _, thread = _pane(host, "thread")
        assert thread.lines[-1] == "No replies in this thread"

    def test_switching_channel_closes_thread(self, session, host):
        _select(host, "# general")
        handle, _ = _pane(host, "messages")
        host.cursor_to(handle, "  second")
        host.press(handle, "enter")

        _select(host, "# random")

        assert host.handle_named("thread") is None


class TestTeardown:
    def test_close_releases_everything(self, session, host):
        closed = []
        session.on_closed = lambda: closed.append(True)
        _select(host, "# general")

        handle, _ = _pane(host, "channels")
        host.press(handle, "q")

        assert host.panes == {}
        assert closed == [True]
        assert session.bus.handler_count(CHANNEL_SELECTED) == 0
        assert not session.cache.channels_loaded()
        assert session.cache.get_current_channel() is None

    def test_actions_after_close_are_ignored(self, session, host):
        handle = host.handle_named("messages")
        session.close()

        session.handle_action(handle, "refresh")

        assert host.notifications == []

    def test_failed_load_after_close_is_silent(self, host):
        gateway = FakeGateway(deferred=True)
        gateway.channels = [make_channel("C1", "general")]
        session = UISession(host, gateway)
        session.start()
        gateway.flush()
        _select(host, "# general")
        gateway.failing.add("load messages")

        session.close()
        gateway.flush()

        assert host.notifications == []


def test_closed_pane_rejects_render(session):
    session.messages.close()
    with pytest.raises(InvalidPaneState):
        session.messages.render()
    with pytest.raises(InvalidPaneState):
        session.messages.open()
