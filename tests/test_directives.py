"""Tests for src.core.directives — encode / parse / clean of action directives."""

import pytest
from pydantic import ValidationError

from src.core.directives import (
    Call,
    PlaySong,
    PlayVideo,
    SetReminder,
    Translate,
    WhatsAppLink,
    clean_response,
    encode,
    parse_action_codes,
    whatsapp_link,
)


# ---------------------------------------------------------------------------
# Wire format
# ---------------------------------------------------------------------------


class TestEncode:
    def test_set_reminder(self):
        assert encode(SetReminder(datetime="2024-01-02T09:00:00")) == (
            "[SET_REMINDER: 2024-01-02T09:00:00]"
        )

    def test_whatsapp(self):
        assert encode(WhatsAppLink(phone="9876543210", message="hi")) == (
            "[WHATSAPP_LINK: 9876543210|hi]"
        )

    def test_translate_without_oral(self):
        directive = Translate(language="Tamil", text_to_translate="Hello")
        assert encode(directive) == "[TRANSLATE: Tamil|Hello]"

    def test_translate_with_oral(self):
        directive = Translate(language="Tamil", text_to_translate="Hello", oral=True)
        assert encode(directive) == "[TRANSLATE: Tamil|Hello|oral]"

    def test_call(self):
        assert encode(Call(phone="Mom", contact="Mom")) == "[CALL: Mom|Mom]"

    def test_video_and_song(self):
        assert encode(PlayVideo(title="Metropolis")) == "[PLAY_VIDEO: Metropolis]"
        assert encode(PlaySong(title="Clair de Lune")) == "[PLAY_SONG: Clair de Lune]"

    def test_brackets_are_neutralized(self):
        encoded = encode(PlaySong(title="Song [live]"))
        assert encoded == "[PLAY_SONG: Song (live)]"

    def test_newlines_collapse_to_spaces(self):
        encoded = encode(WhatsAppLink(phone="9876543210", message="see\nyou"))
        assert encoded == "[WHATSAPP_LINK: 9876543210|see you]"

    def test_pipe_in_leading_field_is_replaced(self):
        encoded = encode(Call(phone="a|b", contact="Bob"))
        assert encoded == "[CALL: a/b|Bob]"

    def test_empty_required_field_rejected(self):
        with pytest.raises(ValidationError):
            PlaySong(title="")


# ---------------------------------------------------------------------------
# Round trip: encode → parse → clean, one case per directive kind
# ---------------------------------------------------------------------------


_ROUND_TRIP_CASES = [
    SetReminder(datetime="2024-01-02T09:00:00"),
    WhatsAppLink(phone="+919876543210", message="Running late, see you at 7"),
    Translate(language="Tamil", text_to_translate="Good morning"),
    Translate(language="French", text_to_translate="Thank you", oral=True),
    Call(phone="+919876543210", contact="+919876543210"),
    Call(phone="Mom", contact="Mom"),
    PlayVideo(title="The General"),
    PlaySong(title="Moonlight Sonata"),
]


@pytest.mark.parametrize("directive", _ROUND_TRIP_CASES, ids=lambda d: d.kind)
def test_round_trip(directive):
    reply = f"Here you go.\n{encode(directive)}"

    parsed = parse_action_codes(reply)
    assert len(parsed) == 1
    assert type(parsed[0]) is type(directive)
    assert parsed[0].model_dump() == directive.model_dump()

    cleaned = clean_response(reply)
    assert cleaned == "Here you go."
    assert "[" not in cleaned and "]" not in cleaned


class TestRoundTripEdges:
    def test_pipe_inside_whatsapp_message_survives(self):
        directive = WhatsAppLink(phone="9876543210", message="yes | no")
        parsed = parse_action_codes(encode(directive))
        assert parsed[0].message == "yes | no"

    def test_translate_text_cannot_fake_oral_flag(self):
        directive = Translate(language="Hindi", text_to_translate="x|oral")
        parsed = parse_action_codes(encode(directive))
        assert parsed[0].oral is False
        assert parsed[0].text_to_translate == "x/oral"


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseActionCodes:
    def test_finds_all_occurrences_in_document_order(self):
        reply = (
            "Two things.\n"
            "[PLAY_SONG: First]\n"
            "[SET_REMINDER: 2024-01-02T09:00:00]\n"
            "[PLAY_SONG: Second]"
        )
        parsed = parse_action_codes(reply)
        assert [type(a) for a in parsed] == [PlaySong, SetReminder, PlaySong]
        assert parsed[0].title == "First"
        assert parsed[2].title == "Second"

    def test_no_directives(self):
        assert parse_action_codes("Just a chat reply.") == []

    def test_fields_are_trimmed(self):
        parsed = parse_action_codes("[CALL:   Mom  |  Mom ]")
        assert parsed[0].phone == "Mom"
        assert parsed[0].contact == "Mom"

    def test_missing_field_is_skipped(self):
        assert parse_action_codes("[CALL: Mom]") == []
        assert parse_action_codes("[WHATSAPP_LINK: 9876543210|]") == []

    def test_unknown_kind_is_ignored(self):
        assert parse_action_codes("[SEND_EMAIL: boss|hi]") == []

    def test_keyword_is_case_sensitive(self):
        assert parse_action_codes("[play_song: Hello]") == []

    def test_oral_token_parsed(self):
        parsed = parse_action_codes("[TRANSLATE: Tamil|Hello|oral]")
        assert parsed[0].oral is True
        assert parsed[0].text_to_translate == "Hello"


class TestDerivedFields:
    def test_whatsapp_link_strips_phone_and_encodes_message(self):
        action = WhatsAppLink(phone="+91 98765-43210", message="Hi there & bye!")
        assert action.link == "https://wa.me/919876543210?text=Hi%20there%20%26%20bye!"

    def test_whatsapp_link_helper(self):
        assert whatsapp_link("9876543210", "hi") == "https://wa.me/9876543210?text=hi"

    def test_labels(self):
        assert WhatsAppLink(phone="1", message="m").text == "Open WhatsApp"
        assert Translate(language="Tamil", text_to_translate="x").text == "Translate to Tamil"
        assert Call(phone="1", contact="Mom").text == "Call Mom"
        assert PlayVideo(title="Nosferatu").text == "Play video: Nosferatu"
        assert PlaySong(title="Bolero").text == "Play song: Bolero"

    def test_reminder_label_formats_date(self):
        action = SetReminder(datetime="2024-01-02T09:00:00")
        assert action.text == "Reminder set for 02 Jan 2024, 09:00"

    def test_reminder_label_with_bad_date(self):
        action = SetReminder(datetime="sometime")
        assert action.text == "Reminder set for the specified time"

    def test_model_dump_includes_label(self):
        dumped = PlaySong(title="Bolero").model_dump()
        assert dumped == {"title": "Bolero", "text": "Play song: Bolero"}


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------


class TestCleanResponse:
    def test_strips_every_kind(self):
        reply = (
            "Done. [SET_REMINDER: x] [WHATSAPP_LINK: 1|m] [TRANSLATE: a|b] "
            "[CALL: a|b] [PLAY_VIDEO: v] [PLAY_SONG: s]"
        )
        assert clean_response(reply).strip() == "Done."

    def test_keeps_unrelated_brackets(self):
        assert clean_response("See [note] above") == "See [note] above"

    def test_trims_whitespace(self):
        assert clean_response("  Playing.\n[PLAY_SONG: s]\n") == "Playing."

    @pytest.mark.parametrize("text", [
        "Playing.\n[PLAY_SONG: s]",
        "[[PLAY_SONG: a]PLAY_SONG: b] tail",
        "no directives at all",
        "  [CALL: a|b]  ",
    ])
    def test_idempotent(self, text):
        once = clean_response(text)
        assert clean_response(once) == once

    def test_nested_directive_fully_removed(self):
        assert clean_response("[[PLAY_SONG: a]PLAY_SONG: b] tail") == "tail"
