"""Shared fixtures."""

from __future__ import annotations

import pytest

from fakes import FakeHttpClient, rss_document, rss_item


@pytest.fixture
def http() -> FakeHttpClient:
    return FakeHttpClient()


@pytest.fixture
def three_item_feed() -> bytes:
    return rss_document([
        rss_item(
            title="Software Architecture Basics",
            link="https://example.com/architecture",
            description="An introduction to software architecture and layering.",
            pub_date="Mon, 01 Jan 2024 12:00:00 GMT",
        ),
        rss_item(
            title="Cooking Pasta",
            link="https://example.com/pasta",
            description="Boil water, add salt, cook pasta until al dente.",
            pub_date="Tue, 02 Jan 2024 12:00:00 GMT",
        ),
        rss_item(
            title="Layered Architecture in Practice",
            link="https://example.com/layers",
            description="Layering and architecture decisions for large software systems.",
            pub_date="Wed, 03 Jan 2024 12:00:00 GMT",
        ),
    ])
