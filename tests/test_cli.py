"""Tests for rss_reader.cli."""

from unittest.mock import patch

from fakes import FakeHttpClient, feed_response, rss_document, rss_item
from rss_reader import cli
from rss_reader.core import RSSReader


def _offline_reader(http):
    def factory(*, settings=None, **kwargs):
        return RSSReader(settings=settings, http=http)
    return factory


def test_keywords_command(capsys) -> None:
    assert cli.main(["keywords", "rust rust python", "-n", "1"]) == 0
    out = capsys.readouterr().out.strip().splitlines()
    assert out == ["0.6667  rust"]


def test_preview_command_prints_newest_first(capsys) -> None:
    url = "https://example.com/feed.xml"
    http = FakeHttpClient({url: feed_response(rss_document([
        rss_item(title="Older", link="https://example.com/1", pub_date="Mon, 01 Jan 2024 12:00:00 GMT"),
        rss_item(title="Newer", link="https://example.com/2", pub_date="Tue, 02 Jan 2024 12:00:00 GMT"),
    ]))})
    with patch.object(cli, "RSSReader", _offline_reader(http)):
        assert cli.main(["preview", url, "--limit", "1"]) == 0
    out = capsys.readouterr().out
    assert "Example Blog" in out
    assert "Newer" in out
    assert "Older" not in out


def test_discover_failure_exits_with_1(capsys) -> None:
    with patch.object(cli, "RSSReader", _offline_reader(FakeHttpClient())):
        assert cli.main(["discover", "https://nowhere.example.com"]) == 1
    assert capsys.readouterr().out == ""
