"""Tests for src.core.action_service — notices shown for parsed directives.

No Telegram dependency anywhere in this file.
"""

import pytest

from src.core.action_service import (
    ActionNotice,
    build_notice,
    build_notices,
    youtube_search_link,
)
from src.core.directives import (
    Call,
    PlaySong,
    PlayVideo,
    SetReminder,
    Translate,
    WhatsAppLink,
    parse_action_codes,
)


class TestYoutubeSearchLink:
    def test_encodes_spaces(self):
        assert youtube_search_link("The General") == (
            "https://www.youtube.com/results?search_query=The%20General"
        )

    def test_encodes_reserved_characters(self):
        assert youtube_search_link("Rock & Roll?") == (
            "https://www.youtube.com/results?search_query=Rock%20%26%20Roll%3F"
        )


class TestBuildNotice:
    def test_reminder(self):
        notice = build_notice(SetReminder(datetime="2024-01-02T09:00:00"))
        assert notice == ActionNotice(text="Reminder set for 02 Jan 2024, 09:00")

    def test_whatsapp_has_link(self):
        notice = build_notice(WhatsAppLink(phone="9876543210", message="hi"))
        assert notice.text == "WhatsApp message ready for 9876543210"
        assert notice.link == "https://wa.me/9876543210?text=hi"

    def test_translate(self):
        notice = build_notice(Translate(language="Tamil", text_to_translate="Hello"))
        assert notice.text == "Translate to Tamil"
        assert notice.link is None

    def test_call(self):
        notice = build_notice(Call(phone="Mom", contact="Mom"))
        assert notice.text == "Call Mom"
        assert notice.link is None

    def test_video_searches_public_domain(self):
        notice = build_notice(PlayVideo(title="The General"))
        assert notice.text == 'Search for "The General"'
        assert notice.link == (
            "https://www.youtube.com/results?search_query=The%20General%20public%20domain"
        )

    def test_song_searches_title(self):
        notice = build_notice(PlaySong(title="Bolero"))
        assert notice.text == 'Search for "Bolero"'
        assert notice.link == "https://www.youtube.com/results?search_query=Bolero"

    def test_unknown_action_rejected(self):
        with pytest.raises(TypeError):
            build_notice(object())


class TestBuildNotices:
    def test_preserves_order(self):
        actions = parse_action_codes(
            "Ok.\n[PLAY_SONG: Bolero]\n[CALL: Mom|Mom]\n[SET_REMINDER: 2024-01-02T09:00:00]"
        )
        notices = build_notices(actions)
        assert [n.text for n in notices] == [
            'Search for "Bolero"',
            "Call Mom",
            "Reminder set for 02 Jan 2024, 09:00",
        ]

    def test_empty(self):
        assert build_notices([]) == []
