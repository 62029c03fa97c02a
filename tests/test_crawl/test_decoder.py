"""
Unit tests for the response decoder.
"""

import pytest

from review_collector.crawl.decoder import (
    DecodeOutcome,
    ResponseDecoder,
    decode_unicode,
    decode_utf8,
    is_json_content_type,
    remove_leading_chars,
)
from review_collector.errors import DecodeError


@pytest.fixture
def decoder():
    return ResponseDecoder()


def test_valid_response_yields_html(decoder, make_response, envelope, review_html):
    response = make_response(envelope(review_html()))

    page = decoder.decode(response)

    assert page.outcome is DecodeOutcome.HTML
    assert isinstance(page.html, str)
    assert '<div class="single-review">' in page.html
    assert page.error is None


@pytest.mark.parametrize("content_type", [
    "text/html; charset=utf-8",
    "text/plain",
    "",
    None,
])
def test_non_json_content_type_is_invalid(decoder, make_response, envelope, review_html, content_type):
    """Even a perfect envelope is rejected without a JSON content type."""
    response = make_response(envelope(review_html()), content_type=content_type)

    page = decoder.decode(response)

    assert page.outcome is DecodeOutcome.INVALID
    assert isinstance(page.error, DecodeError)


def test_non_json_content_type_with_empty_array_is_invalid(decoder, make_response):
    page = decoder.decode(make_response("[]", content_type="text/html"))
    assert page.outcome is DecodeOutcome.INVALID


@pytest.mark.parametrize("body", [
    "[]",
    ")]}'\n[]",
    '[["ecr.rws", 1]]',
    '[["ecr.rws", 1, "<div></div>", 40, "extra"]]',
    '[null]',
    '["not an envelope"]',
])
def test_empty_or_reshaped_array_means_no_more_reviews(decoder, make_response, body):
    page = decoder.decode(make_response(body))

    assert page.outcome is DecodeOutcome.EMPTY
    assert page.html is None
    assert page.error is None


@pytest.mark.parametrize("body", [
    "this is not json",
    ")]}'\n[[\"unterminated",
    '{"reviews": []}',
    '[["ecr.rws", 1, 42, 40]]',
])
def test_malformed_json_is_invalid(decoder, make_response, body):
    page = decoder.decode(make_response(body))

    assert page.outcome is DecodeOutcome.INVALID
    assert isinstance(page.error, DecodeError)


def test_content_type_parameters_and_case_are_ignored(decoder, make_response):
    response = make_response('[["ecr.rws", 1, "<p>hi</p>", 40]]', content_type="Application/JSON")

    page = decoder.decode(response)

    assert page.outcome is DecodeOutcome.HTML
    assert page.html == "<p>hi</p>"


def test_unicode_escapes_survive_decoding(decoder, make_response, envelope, review_html):
    html = review_html(title="Très bien", text="Ça marche 👍")
    page = decoder.decode(make_response(envelope(html)))

    assert page.outcome is DecodeOutcome.HTML
    assert "Très bien" in page.html
    assert "Ça marche 👍" in page.html


def test_decode_unicode_replaces_escapes():
    assert decode_unicode("\\u003cdiv\\u003e") == "<div>"
    assert decode_unicode("no escapes") == "no escapes"


def test_decode_utf8_repairs_double_encoding():
    assert decode_utf8("TrÃ¨s") == "Très"


def test_decode_utf8_leaves_plain_text_alone():
    assert decode_utf8("Très") == "Très"
    assert decode_utf8("评论") == "评论"


def test_remove_leading_chars():
    assert remove_leading_chars(")]}'\n[1, 2]") == "[1, 2]"
    assert remove_leading_chars("[1]") == "[1]"
    assert remove_leading_chars("no brackets") == "no brackets"


def test_is_json_content_type():
    assert is_json_content_type("application/json; charset=utf-8")
    assert is_json_content_type("application/json")
    assert not is_json_content_type("application/javascript")
    assert not is_json_content_type(None)


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
