from datetime import datetime, timezone

import pytest

import clipsbot.command as command_module
from clipsbot.command import (
    DEFAULT_TOP,
    Command,
    DateParseError,
    MissingBroadcasterError,
    NotACommandError,
    parse_command,
)

NOW = datetime(2024, 3, 31, 15, 42, 17, tzinfo=timezone.utc)
TODAY = datetime(2024, 3, 31, tzinfo=timezone.utc)


def utc(year, month, day):
    return datetime(year, month, day, tzinfo=timezone.utc)


def test_parse_full_command_with_dates():
    result = parse_command('!clips Streamer "Super funny clip!" Creator 2020-05-30 2020-06-30')

    assert result.broadcaster == "Streamer"
    assert result.creator == "Creator"
    assert result.title == "Super funny clip!"
    assert result.started_at == utc(2020, 5, 30)
    assert result.ended_at == utc(2020, 6, 30)
    assert result.sub_command == ""


def test_parse_only_title():
    result = parse_command('!clips Streamer "Super funny clip!"')

    assert result.broadcaster == "Streamer"
    assert result.title == "Super funny clip!"
    assert result.creator == ""
    assert result.started_at is None
    assert result.ended_at is None


def test_parse_only_streamer():
    result = parse_command("!clips Streamer")

    assert result == Command(broadcaster="Streamer")


def test_prefix_anywhere_else_is_not_a_command():
    with pytest.raises(NotACommandError):
        parse_command("This is not a valid clips command even if !clips is in it")


def test_prefix_contains_policy(monkeypatch):
    monkeypatch.setattr(command_module, "PREFIX_POLICY", "contains")

    result = parse_command("hey !clips Streamer")

    assert result.broadcaster == "hey"


def test_reparsing_residual_text_is_not_a_command():
    with pytest.raises(NotACommandError):
        parse_command('Streamer "Super funny clip!" Creator')


def test_relative_days():
    result = parse_command('!clips Streamer "Super funny clip!" Creator 7d', now=NOW)

    assert result.broadcaster == "Streamer"
    assert result.creator == "Creator"
    assert result.title == "Super funny clip!"
    assert result.started_at == utc(2024, 3, 24)
    assert result.ended_at == TODAY


def test_relative_months_clamps_to_month_end():
    result = parse_command('!clips Streamer "Super funny clip!" Creator 1m', now=NOW)

    assert result.started_at == utc(2024, 2, 29)
    assert result.ended_at == TODAY
    assert result.creator == "Creator"


def test_relative_years():
    result = parse_command("!clips Streamer 2y", now=NOW)

    assert result.started_at == utc(2022, 3, 31)
    assert result.ended_at == TODAY
    assert result.creator == ""


def test_single_absolute_date_sets_start_only():
    result = parse_command("!clips Streamer 2021-01-15")

    assert result.started_at == utc(2021, 1, 15)
    assert result.ended_at is None


def test_absolute_dates_keep_order_of_appearance():
    result = parse_command("!clips 2021-06-01 Streamer 2021-01-01")

    assert result.started_at == utc(2021, 6, 1)
    assert result.ended_at == utc(2021, 1, 1)
    assert result.broadcaster == "Streamer"


def test_absolute_dates_take_precedence_over_relative():
    result = parse_command("!clips Streamer 2020-05-30 7d", now=NOW)

    assert result.started_at == utc(2020, 5, 30)
    assert result.ended_at is None
    # The relative token is left in place and read positionally
    assert result.creator == "7d"


def test_digits_inside_a_name_are_not_a_relative_date():
    result = parse_command("!clips k3dy", now=NOW)

    assert result.broadcaster == "k3dy"
    assert result.started_at is None
    assert result.ended_at is None


def test_invalid_calendar_date_fails_parse():
    with pytest.raises(DateParseError):
        parse_command("!clips Streamer 2021-02-30")


def test_title_before_streamer():
    result = parse_command('!clips "Super funny clip!" Streamer Creator')

    assert result.title == "Super funny clip!"
    assert result.broadcaster == "Streamer"
    assert result.creator == "Creator"


def test_single_quoted_title_is_removed_with_its_quotes():
    result = parse_command("!clips Streamer 'what a play' Creator")

    assert result.title == "what a play"
    assert result.broadcaster == "Streamer"
    assert result.creator == "Creator"


def test_apostrophe_inside_double_quoted_title():
    result = parse_command('!clips Streamer "Ninja\'s clutch" Creator')

    assert result.title == "Ninja's clutch"
    assert result.broadcaster == "Streamer"
    assert result.creator == "Creator"


def test_unpaired_apostrophe_before_title_is_skipped():
    result = parse_command('!clips Streamer Ninja\'s "clutch"')

    assert result.title == "clutch"
    assert result.broadcaster == "Streamer"
    assert result.creator == "Ninja's"


def test_double_quotes_inside_single_quoted_title():
    result = parse_command("!clips Streamer 'the \"best\" one' Creator")

    assert result.title == 'the "best" one'
    assert result.creator == "Creator"


def test_title_whitespace_is_kept():
    result = parse_command('!clips Streamer " spaced out "')

    assert result.title == " spaced out "
    assert result.broadcaster == "Streamer"


def test_plain_lookup_has_no_sub_command():
    result = parse_command("!clips Streamer")

    assert result.is_lookup
    assert not result.is_help
    assert not result.is_top


def test_help_sub_command():
    result = parse_command("!clips help")

    assert result.sub_command == "help"
    assert result.is_help
    assert result.broadcaster == ""


def test_top_without_number_defaults():
    result = parse_command("!clips top Streamer")

    assert result.sub_command == "top"
    assert result.top == DEFAULT_TOP
    assert result.is_top
    assert not result.is_lookup
    assert result.broadcaster == "Streamer"


def test_top_with_number():
    result = parse_command("!clips top5 Streamer Creator")

    assert result.top == 5
    assert result.broadcaster == "Streamer"
    assert result.creator == "Creator"


def test_top_with_non_numeric_suffix_defaults(caplog):
    result = parse_command("!clips topX Streamer")

    assert result.top == DEFAULT_TOP
    assert result.broadcaster == "Streamer"
    assert "Non-numeric count 'X'" in caplog.text


def test_top_after_dates_and_title():
    result = parse_command('!clips 2020-05-30 "funny" top3 Streamer', now=NOW)

    assert result.sub_command == "top"
    assert result.top == 3
    assert result.title == "funny"
    assert result.started_at == utc(2020, 5, 30)
    assert result.broadcaster == "Streamer"


def test_extra_words_are_ignored():
    result = parse_command("!clips Streamer Creator something else")

    assert result.broadcaster == "Streamer"
    assert result.creator == "Creator"


def test_empty_command_parses_without_error():
    result = parse_command("!clips")

    assert result == Command()


def test_validate_requires_broadcaster():
    with pytest.raises(MissingBroadcasterError):
        Command().validate()
    with pytest.raises(MissingBroadcasterError):
        Command(sub_command="top", top=10).validate()

    Command(sub_command="help").validate()
    Command(broadcaster="Streamer").validate()
