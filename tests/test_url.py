import pytest

from htmlmarkdown.url import (
    default_assemble_absolute_url,
    parse_and_encode_query,
    parse_base_domain,
)

_GIF = (
    "data:image/gif;base64,R0lGODlhEAAQAMQAAORHHOVSKudfOulrSOp3WOyDZu6QdvCchPGolfO0o/"
    "XBs/fNwfjZ0frl3/zy7////wAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAACH5"
    "BAkAABAALAAAAAAQABAAAAVVICSOZGlCQAosJ6mu7fiyZeKqNKToQGDsM8hBADgUXoGAiqhSvp5QAnQKGIgUhwFU"
    "YLCVDFCrKUE1lBavAViFIDlTImbKC5Gm2hB0SlBCBMQiB0UjIQA7"
)


@pytest.mark.parametrize(
    ("tag_name", "raw_url", "domain", "expected"),
    [
        ("", "  example.com  \n  ", "", "example.com"),
        ("a", "#", "", "#"),
        ("a", "#heading", "", "#heading"),
        ("a", "#my heading", "", "#my%20heading"),
        ("a", "/page.html?key=val#hash", "", "/page.html?key=val#hash"),
        ("a", "/page.html?key=val#hash", "test.com", "http://test.com/page.html?key=val#hash"),
        (
            "a",
            "/page.html?key=val#hash",
            "http://test.com",
            "http://test.com/page.html?key=val#hash",
        ),
        (
            "a",
            "/page.html?key=val#hash",
            "https://test.com",
            "https://test.com/page.html?key=val#hash",
        ),
        (
            "a",
            "/page.html?key=val#hash",
            "https://test.com/random_stuff",
            "https://test.com/page.html?key=val#hash",
        ),
        ("a", _GIF, "test.com", _GIF),
        (
            "a",
            "data:image/svg+xml,%3Csvg xmlns='http://www.w3.org/2000/svg' viewBox='0 0 56 56' "
            "width='56' height='56' %3E%3C/svg%3E",
            "test.com",
            "data:image/svg+xml,%3Csvg%20xmlns='http://www.w3.org/2000/svg'%20viewBox='0%200%2056"
            "%2056'%20width='56'%20height='56'%20%3E%3C/svg%3E",
        ),
        ("a", "slack://open?team=abc", "test.com", "slack://open?team=abc"),
        ("a", "http://www.example.com", "test.com", "http://www.example.com"),
        ("a", "https://www.example.com", "test.com", "https://www.example.com"),
        (
            "",
            "https://www.example.com?a=1&c=2&b=3&x=&y",
            "test.com",
            "https://www.example.com?a=1&c=2&b=3&x=&y",
        ),
        ("", "https://Open Demo", "", "https://Open%20Demo"),
        ("", "https://Open [foo](uri) Demo", "", "https://Open%20%5Bfoo%5D%28uri%29%20Demo"),
        (
            "a",
            "mailto:hi@example.com?subject=Mail&cc=someoneelse@example.com",
            "test.com",
            "mailto:hi@example.com?subject=Mail&cc=someoneelse%40example.com",
        ),
        (
            "a",
            "mailto:hi@example.com?body=Hello\nJohannes",
            "test.com",
            "mailto:hi@example.com?body=Hello%0AJohannes",
        ),
        (
            "a",
            "mailto:hi@example.com?subject=Hello%20Johannes",
            "test.com",
            "mailto:hi@example.com?subject=Hello%20Johannes",
        ),
        (
            "a",
            "mailto:hi@example.com?subject=Greetings to Johannes",
            "test.com",
            "mailto:hi@example.com?subject=Greetings%20to%20Johannes",
        ),
        (
            "a",
            "mailto:hi@example.com?subject=Sie können gern einen Screenshot anhängen",
            "test.com",
            "mailto:hi@example.com?subject=Sie%20k%C3%B6nnen%20gern%20einen%20Screenshot"
            "%20anh%C3%A4ngen",
        ),
        (
            "a",
            "mailto:hi@example.com?body=Article: www.website.com/page.html",
            "test.com",
            "mailto:hi@example.com?body=Article%3A%20www.website.com%2Fpage.html",
        ),
        ("a", "foo(and(bar)", "", "foo%28and%28bar%29"),
        ("a", "[foo](uri)", "", "%5Bfoo%5D%28uri%29"),
    ],
)
def test_default_assemble_absolute_url(tag_name, raw_url, domain, expected):
    assert default_assemble_absolute_url(tag_name, raw_url, domain) == expected


def test_relative_path_is_resolved_against_domain_path():
    result = default_assemble_absolute_url("a", "other.html", "https://test.com/dir/page")
    assert result == "https://test.com/dir/other.html"


def test_dot_dot_segments_are_resolved():
    result = default_assemble_absolute_url("img", "../up.html", "https://test.com/a/b/c")
    assert result == "https://test.com/a/up.html"


def test_invalid_escape_returns_input():
    assert default_assemble_absolute_url("a", "100%zz", "") == "100%zz"


@pytest.mark.parametrize(
    ("raw_query", "expected"),
    [
        ("", ""),
        ("a=1", "a=1"),
        ("a=1&b=2&c=3", "a=1&b=2&c=3"),
        ("a=1&c=2&b=3", "a=1&c=2&b=3"),
        ("a=hello world&b=hello", "a=hello+world&b=hello"),
        ("key=%20", "key=+"),
        ("%20=value", "+=value"),
        ("key=+", "key=+"),
        ("+=value", "+=value"),
        ("a=1&b=%&c=hello world", "a=1&b=%&c=hello+world"),
        ("a=1&%=2&c=hello world", "a=1&%=2&c=hello+world"),
    ],
)
def test_parse_and_encode_query(raw_query, expected):
    assert parse_and_encode_query(raw_query) == expected


def test_parse_base_domain_empty():
    assert parse_base_domain("") is None


@pytest.mark.parametrize(
    ("raw_domain", "expected"),
    [
        ("test.com", "http://test.com"),
        ("https://test.com", "https://test.com"),
        ("http://test.com/path", "http://test.com/path"),
    ],
)
def test_parse_base_domain(raw_domain, expected):
    assert str(parse_base_domain(raw_domain)) == expected