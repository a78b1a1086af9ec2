from datetime import datetime, timezone

from clipsbot.bot import (
    GENERIC_FAILURE_REPLY,
    HELP_TEXT,
    INVALID_DATE_REPLY,
    MISSING_BROADCASTER_REPLY,
    NO_MATCH_REPLY,
    ClipsBot,
)
from clipsbot.utils.twitch_client import (
    Broadcaster,
    BroadcasterNotFoundError,
    Clip,
    ClipPage,
    TransportError,
)

NOW = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)


class FakeTwitch:
    def __init__(self, clips=(), broadcasters=None, fail=False):
        self.clips = tuple(clips)
        self.broadcasters = broadcasters if broadcasters is not None else {"streamer": "123"}
        self.fail = fail
        self.clip_requests = []

    def get_broadcasters_by_name(self, names):
        found = [Broadcaster(id=self.broadcasters[n.lower()], login=n.lower()) for n in names
                 if n.lower() in self.broadcasters]
        if not found:
            raise BroadcasterNotFoundError(names)
        return found

    def get_clips(self, broadcaster_id, after="", before="", started_at=None, ended_at=None, first=100):
        self.clip_requests.append((broadcaster_id, started_at, ended_at))
        if self.fail:
            raise TransportError("Helix is down", status_code=503)
        return ClipPage(clips=self.clips)


def clip(id, views, title="", creator=""):
    return Clip(id=id, url=f"https://clips.twitch.tv/{id}", title=title, creator_name=creator, view_count=views)


def make_bot(twitch):
    return ClipsBot(twitch, now=lambda: NOW)


def test_ignores_non_commands():
    bot = make_bot(FakeTwitch())

    assert bot.handle_message("hello chat") is None
    assert bot.handle_message("what does !clips do?") is None


def test_help():
    assert make_bot(FakeTwitch()).handle_message("!clips help") == HELP_TEXT


def test_missing_broadcaster():
    assert make_bot(FakeTwitch()).handle_message("!clips") == MISSING_BROADCASTER_REPLY
    assert make_bot(FakeTwitch()).handle_message("!clips top5") == MISSING_BROADCASTER_REPLY


def test_unknown_streamer():
    reply = make_bot(FakeTwitch()).handle_message("!clips nobody")

    assert reply == "Couldn't find a streamer named \"nobody\". Could you check the name and try again?"


def test_finds_most_popular_clip():
    twitch = FakeTwitch(clips=[clip("a", 5), clip("b", 50), clip("c", 7)])

    reply = make_bot(twitch).handle_message("!clips Streamer")

    assert reply == "Found your clip: https://clips.twitch.tv/b"
    assert twitch.clip_requests[0][0] == "123"


def test_finds_specific_clip():
    twitch = FakeTwitch(clips=[
        clip("a", 500, title="Super funny clip!", creator="Other"),
        clip("b", 1, title="super funny clip!", creator="Creator"),
    ])

    reply = make_bot(twitch).handle_message('!clips Streamer "Super funny clip!" Creator 2020-05-30 2020-06-30')

    assert reply == "Found your clip: https://clips.twitch.tv/b"
    assert twitch.clip_requests[0][1] == datetime(2020, 5, 30, tzinfo=timezone.utc)
    assert twitch.clip_requests[0][2] == datetime(2020, 6, 30, tzinfo=timezone.utc)


def test_no_matching_clip():
    twitch = FakeTwitch(clips=[clip("a", 5, title="boring")])

    assert make_bot(twitch).handle_message('!clips Streamer "funny"') == NO_MATCH_REPLY


def test_top_clips_list():
    twitch = FakeTwitch(clips=[
        clip("a", 5, title="First", creator="Ann"),
        clip("b", 50, title="Second", creator="Bob"),
        clip("c", 7, title="Third", creator="Cid"),
    ])

    reply = make_bot(twitch).handle_message("!clips top2 Streamer 2024-03-01 2024-03-31")

    assert reply.splitlines() == [
        "Top 2 Streamer clips from 2024-03-01 to 2024-03-31",
        '1. "Second" by Bob. Views: 50',
        '2. "Third" by Cid. Views: 7',
    ]


def test_top_clips_default_window_in_header():
    twitch = FakeTwitch(clips=[clip("a", 5, title="Only", creator="Ann")])

    reply = make_bot(twitch).handle_message("!clips top Streamer")

    assert reply.splitlines()[0] == "Top 1 Streamer clips from 2024-03-24 to 2024-03-31"


def test_top_clips_none_found():
    reply = make_bot(FakeTwitch()).handle_message("!clips top Streamer")

    assert reply == "Couldn't find any \"Streamer\" clips. Check the streamer name and the date bounds."


def test_invalid_date():
    assert make_bot(FakeTwitch()).handle_message("!clips Streamer 2021-02-30") == INVALID_DATE_REPLY


def test_transport_failure_is_not_reported_as_not_found():
    reply = make_bot(FakeTwitch(fail=True)).handle_message("!clips Streamer")

    assert reply == GENERIC_FAILURE_REPLY
    assert "503" not in reply
