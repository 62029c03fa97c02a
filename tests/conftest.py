"""
Shared fixtures: builders for review HTML and storefront responses.
"""

import json

import pytest
import requests
from requests.structures import CaseInsensitiveDict

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def _review_html(
    review_id="gp:AOqpTOE1",
    date="January 5, 2016",
    width=80,
    title="Great app",
    text="Works well on my phone"
):
    header_attr = f' data-reviewid="{review_id}"' if review_id is not None else ""
    rating_style = f' style="width: {width}%;"' if width is not None else ""
    return (
        '<div class="single-review">'
        f'<div class="review-header"{header_attr}>'
        '<div class="review-info">'
        f'<span class="author-name"><a href="/store/people">A user</a></span>'
        f'<span class="review-date">{date}</span>'
        '<div class="review-info-star-rating">'
        '<div class="tiny-star star-rating-non-editable-container">'
        f'<div class="current-rating"{rating_style}></div>'
        '</div></div></div></div>'
        '<div class="review-body">'
        f'<span class="review-title"> {title} </span> {text} '
        '<div class="review-link"><a class="id-no-nav play-button tiny" href="#">Full Review</a></div>'
        '</div></div>'
    )


def _page_html(count, start=0):
    return "".join(
        _review_html(review_id=f"gp:review-{start + i}", title=f"Title {start + i}", text=f"Text {start + i}")
        for i in range(count)
    )


def _envelope(html, preamble=")]}'\n"):
    """Wrap HTML the way the storefront does, with escaped markup and a junk prefix."""
    payload = json.dumps([["ecr.rws", 1, html, 40]])
    payload = (
        payload.replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("=", "\\u003d")
    )
    return preamble + payload


def _make_response(body, content_type=JSON_CONTENT_TYPE, status_code=200):
    response = requests.Response()
    response.status_code = status_code
    response.headers = CaseInsensitiveDict({"content-type": content_type})
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


def _page_response(count, start=0):
    return _make_response(_envelope(_page_html(count, start)))


def _empty_response():
    return _make_response(")]}'\n[]")


@pytest.fixture
def review_html():
    return _review_html


@pytest.fixture
def page_html():
    return _page_html


@pytest.fixture
def envelope():
    return _envelope


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def page_response():
    return _page_response


@pytest.fixture
def empty_response():
    return _empty_response
