"""
Unit tests for the review extractor.
"""

from datetime import datetime
from unittest.mock import Mock, patch

import pytest

from review_collector.crawl.extractor import (
    ReviewExtractor,
    parse_date,
    parse_rating,
    review_time_range,
)
from review_collector.errors import ParseError
from review_collector.models.review import ReviewRecord


@pytest.fixture
def extractor():
    return ReviewExtractor()


def test_extracts_every_review_in_document_order(extractor, page_html):
    on_review = Mock()

    reviews = extractor.extract(page_html(40), "an.app.id", 0, on_review=on_review)

    assert len(reviews) == 40
    assert [r.id for r in reviews] == [f"gp:review-{i}" for i in range(40)]
    assert on_review.call_count == 40
    assert [c.args[0] for c in on_review.call_args_list] == reviews


def test_review_fields(extractor, review_html):
    html = review_html(
        review_id="gp:abc",
        date="January 5, 2016",
        width=80,
        title="Great app",
        text="Works well on my phone"
    )

    [review] = extractor.extract(html, "an.app.id", 3)

    assert review.id == "gp:abc"
    assert review.date == datetime(2016, 1, 5)
    assert review.rating == 4
    assert review.title == "Great app"
    assert review.text == "Works well on my phone"
    assert review.app_id == "an.app.id"
    assert review.page_num == 3
    assert review.os == "Android"


@pytest.mark.parametrize("width, rating", [(100, 5), (20, 1), (60, 3), (90, 4.5)])
def test_rating_is_width_over_twenty(extractor, review_html, width, rating):
    [review] = extractor.extract(review_html(width=width), "an.app.id", 0)
    assert review.rating == rating


def test_text_drops_child_markup(extractor):
    html = (
        '<div class="single-review"><div class="review-body">'
        '<span class="review-title">Title</span> Body text '
        '<div class="review-link"><a href="#">Full Review</a></div>'
        '</div></div>'
    )

    [review] = extractor.extract(html, "an.app.id", 0)

    assert review.title == "Title"
    assert review.text == "Body text"
    assert "Full Review" not in review.text


def test_text_drops_html_comments(extractor):
    html = (
        '<div class="single-review"><div class="review-body">'
        '<!-- tracking --> Hello <span class="review-title">T</span>'
        '</div></div>'
    )

    [review] = extractor.extract(html, "an.app.id", 0)

    assert review.text == "Hello"
    assert review.title == "T"


def test_malformed_fields_are_kept_degraded(extractor, review_html):
    html = review_html(review_id=None, date="???", width=None)

    [review] = extractor.extract(html, "an.app.id", 0)

    assert review.id is None
    assert review.date is None
    assert review.rating is None
    assert review.title == "Great app"


def test_bare_fragment_does_not_raise(extractor):
    [review] = extractor.extract('<div class="single-review"></div>', "an.app.id", 0)

    assert review == ReviewRecord(
        id=None, date=None, rating=None, title="", text="", app_id="an.app.id", page_num=0
    )


def test_non_review_html_yields_no_reviews(extractor):
    on_review = Mock()

    reviews = extractor.extract("<div>Some non-review HTML</div>", "an.app.id", 0, on_review=on_review)

    assert reviews == []
    on_review.assert_not_called()


def test_dom_failure_raises_parse_error(extractor):
    with patch("review_collector.crawl.extractor.BeautifulSoup", side_effect=RuntimeError("boom")):
        with pytest.raises(ParseError):
            extractor.extract("<div></div>", "an.app.id", 0)


def test_reviews_are_published_before_the_page_finishes(extractor, page_html):
    """Reviews read before a structural failure have already been handed out."""
    on_review = Mock()
    good = ReviewRecord(id="1", date=None, rating=5, title="", text="", app_id="a", page_num=0)

    with patch.object(ReviewExtractor, "_to_review", side_effect=[good, good, RuntimeError("bad node")]):
        with pytest.raises(ParseError):
            extractor.extract(page_html(3), "a", 0, on_review=on_review)

    assert on_review.call_count == 2


def test_parse_rating():
    assert parse_rating("width: 100%;") == 5
    assert parse_rating("width:40%") == 2
    assert parse_rating("height: 10px") is None
    assert parse_rating(None) is None


def test_parse_date():
    assert parse_date("March 21, 2015") == datetime(2015, 3, 21)
    assert parse_date("") is None
    assert parse_date("--") is None


def test_review_time_range():
    newest = ReviewRecord(id="1", date=datetime(2016, 1, 5), rating=5, title="", text="", app_id="a", page_num=0)
    oldest = ReviewRecord(id="2", date=datetime(2016, 1, 1), rating=5, title="", text="", app_id="a", page_num=0)

    assert review_time_range([newest, oldest]) == (datetime(2016, 1, 1), datetime(2016, 1, 5))
    assert review_time_range([]) == (None, None)


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
