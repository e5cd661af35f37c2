"""Slack Web API gateway.

Every operation takes a ``callback(success, payload)``. On success the
payload is a domain object; on failure it is a :class:`FetchFailure`.
Where the blocking API call runs is decided by the injected runner: the
default runs it inline, the Textual app runs it on a worker thread and
delivers the callback back on the UI thread.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Protocol

from loguru import logger
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from slack_panes.core.errors import FetchFailure
from slack_panes.core.models import Channel, Message, ThreadReplies, User, Workspace

Callback = Callable[[bool, Any], None]
Job = Callable[[], Any]
Runner = Callable[[Job, Callback], None]

CONVERSATION_TYPES = "public_channel,private_channel,mpim,im"


class SlackGateway(Protocol):
    """Operations the pane engine needs from the network."""

    def fetch_channels(self, callback: Callback) -> None: ...

    def fetch_messages(self, channel_id: str, callback: Callback) -> None: ...

    def fetch_thread_replies(self, channel_id: str, thread_ts: str, callback: Callback) -> None: ...

    def fetch_user_by_id(self, user_id: str, callback: Callback) -> None: ...

    def send_message(self, channel_id: str, text: str, callback: Callback) -> None: ...

    def reply_to_thread(self, channel_id: str, thread_ts: str, text: str, callback: Callback) -> None: ...

    def add_reaction(self, channel_id: str, ts: str, emoji: str, callback: Callback) -> None: ...

    def upload_file(self, channel_id: str, path: str, callback: Callback) -> None: ...

    def test_connection(self, callback: Callback) -> None: ...


def _describe(exc: Exception) -> str:
    if isinstance(exc, SlackApiError):
        response = getattr(exc, "response", None)
        try:
            return str(response["error"])
        except (KeyError, TypeError):
            return str(exc)
    return str(exc) or type(exc).__name__


def inline_runner(job: Job, callback: Callback) -> None:
    """Run *job* synchronously and hand its outcome to *callback*."""
    success, payload = execute(job)
    callback(success, payload)


def execute(job: Job) -> tuple[bool, Any]:
    """Run *job*, converting raised failures into ``(False, FetchFailure)``."""
    try:
        return True, job()
    except FetchFailure as exc:
        return False, exc


class SlackWebGateway:
    """`slack_sdk.WebClient` adapter implementing :class:`SlackGateway`."""

    def __init__(
        self,
        token: str | None = None,
        *,
        client: WebClient | None = None,
        runner: Runner | None = None,
        history_limit: int = 100,
    ) -> None:
        self.client = client or WebClient(token=token)
        self.runner = runner or inline_runner
        self.history_limit = history_limit

    def _submit(self, operation: str, job: Job, callback: Callback) -> None:
        def guarded() -> Any:
            try:
                return job()
            except SlackApiError as exc:
                logger.warning("Slack API error during {}: {}", operation, _describe(exc))
                raise FetchFailure(operation, _describe(exc)) from exc
            except FetchFailure:
                raise
            except Exception as exc:
                logger.warning("Transport error during {}: {}", operation, exc)
                raise FetchFailure(operation, _describe(exc)) from exc

        logger.debug("Submitting {}", operation)
        self.runner(guarded, callback)

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    def fetch_channels(self, callback: Callback) -> None:
        def job() -> list[Channel]:
            channels: list[Channel] = []
            cursor: str | None = None
            while True:
                params: dict[str, Any] = {
                    "types": CONVERSATION_TYPES,
                    "exclude_archived": True,
                    "limit": 200,
                }
                if cursor:
                    params["cursor"] = cursor
                result = self.client.conversations_list(**params)
                channels.extend(Channel.from_api(c) for c in result.get("channels", []))
                cursor = (result.get("response_metadata") or {}).get("next_cursor")
                if not cursor:
                    break
            logger.debug("Fetched {} channels", len(channels))
            return channels

        self._submit("load channels", job, callback)

    def fetch_messages(self, channel_id: str, callback: Callback) -> None:
        def job() -> list[Message]:
            result = self.client.conversations_history(channel=channel_id, limit=self.history_limit)
            messages = [Message.from_api(m, channel_id) for m in result.get("messages", [])]
            logger.debug("Fetched {} messages from {}", len(messages), channel_id)
            return messages

        self._submit("load messages", job, callback)

    def fetch_thread_replies(self, channel_id: str, thread_ts: str, callback: Callback) -> None:
        def job() -> ThreadReplies:
            result = self.client.conversations_replies(channel=channel_id, ts=thread_ts)
            parent: Message | None = None
            replies: list[Message] = []
            for raw in result.get("messages", []):
                message = Message.from_api(raw, channel_id)
                if message.ts == thread_ts:
                    parent = message
                else:
                    replies.append(message)
            logger.debug("Fetched {} replies for thread {}", len(replies), thread_ts)
            return ThreadReplies(parent=parent, replies=replies)

        self._submit("load thread", job, callback)

    def fetch_user_by_id(self, user_id: str, callback: Callback) -> None:
        def job() -> User:
            result = self.client.users_info(user=user_id)
            return User.from_api(result.get("user") or {"id": user_id})

        self._submit(f"load user {user_id}", job, callback)

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    def send_message(self, channel_id: str, text: str, callback: Callback) -> None:
        def job() -> str:
            result = self.client.chat_postMessage(channel=channel_id, text=text)
            return str(result.get("ts", ""))

        self._submit("send message", job, callback)

    def reply_to_thread(self, channel_id: str, thread_ts: str, text: str, callback: Callback) -> None:
        def job() -> str:
            result = self.client.chat_postMessage(channel=channel_id, text=text, thread_ts=thread_ts)
            return str(result.get("ts", ""))

        self._submit("send reply", job, callback)

    def add_reaction(self, channel_id: str, ts: str, emoji: str, callback: Callback) -> None:
        name = emoji.strip().strip(":")

        def job() -> str:
            self.client.reactions_add(channel=channel_id, timestamp=ts, name=name)
            return name

        self._submit("add reaction", job, callback)

    def upload_file(self, channel_id: str, path: str, callback: Callback) -> None:
        target = Path(path).expanduser()

        def job() -> str:
            if not target.is_file():
                raise FetchFailure("upload file", f"no such file {target}")
            self.client.files_upload_v2(
                channel=channel_id,
                file=str(target),
                filename=target.name,
                title=target.name,
            )
            return target.name

        self._submit("upload file", job, callback)

    # ------------------------------------------------------------------ #
    # Account                                                              #
    # ------------------------------------------------------------------ #

    def test_connection(self, callback: Callback) -> None:
        """Check the token with auth.test; the payload is a :class:`Workspace`."""

        def job() -> Workspace:
            return Workspace.from_api(self.client.auth_test())

        self._submit("connect to Slack", job, callback)
