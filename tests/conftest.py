"""Shared fixtures: a scripted Slack gateway and the in-memory pane host."""

from __future__ import annotations

import pytest

from slack_panes.core.cache import DomainCache
from slack_panes.core.events import EventBus
from slack_panes.core.models import ChannelKind, ThreadReplies, User
from slack_panes.panes.host import MemoryPaneHost
from slack_panes.panes.session import UISession
from tests.factories import FakeGateway, make_channel, make_message


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def cache(bus: EventBus) -> DomainCache:
    return DomainCache(bus)


@pytest.fixture
def host() -> MemoryPaneHost:
    return MemoryPaneHost()


@pytest.fixture
def gateway() -> FakeGateway:
    gw = FakeGateway()
    gw.channels = [
        make_channel("C1", "general"),
        make_channel("C2", "random"),
        make_channel("G1", "secret", ChannelKind.PRIVATE),
        make_channel("D1", None, ChannelKind.DIRECT, user_id="U2"),
    ]
    gw.messages = {
        "C1": [
            make_message("C1", "100.000", text="first"),
            make_message("C1", "101.000", user="U2", text="second", thread_ts="101.000", reply_count=2),
        ],
        "C2": [make_message("C2", "50.000", text="elsewhere")],
    }
    gw.threads = {
        "101.000": ThreadReplies(
            parent=gw.messages["C1"][1],
            replies=[
                make_message("C1", "102.000", text="reply one", thread_ts="101.000"),
                make_message("C1", "103.000", user="U2", text="reply two", thread_ts="101.000"),
            ],
        )
    }
    gw.users = {
        "U1": User(id="U1", display_name="alice"),
        "U2": User(id="U2", display_name="", real_name="Bob Builder"),
    }
    return gw


@pytest.fixture
def session(host: MemoryPaneHost, gateway: FakeGateway) -> UISession:
    ui = UISession(host, gateway, auto_open_default_channel=False)
    ui.start()
    return ui
