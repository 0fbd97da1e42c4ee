from __future__ import annotations

from telethon.extensions import html
from telethon.tl.types import MessageEntityBold, MessageEntityTextUrl

from adapters.html_entities import TelethonHtmlConverter


def test_bold_entity_round_trips() -> None:
    converter = TelethonHtmlConverter()
    source = "Welcome friends!"
    converted = converter.convert(source, (MessageEntityBold(offset=8, length=7),))
    text, entities = html.parse(converted)
    assert text == source
    assert len(entities) == 1
    assert isinstance(entities[0], MessageEntityBold)
    assert (entities[0].offset, entities[0].length) == (8, 7)


def test_text_url_entity_round_trips() -> None:
    entity = MessageEntityTextUrl(offset=5, length=5, url="https://example.com")
    text, entities = html.parse(TelethonHtmlConverter().convert("Read rules", [entity]))
    assert text == "Read rules"
    assert isinstance(entities[0], MessageEntityTextUrl)
    assert entities[0].url == "https://example.com"


def test_markdown_delimiters_in_plain_text_survive() -> None:
    source = "Read __init__ docs, price is 2**10, see [a](b) and `x`"
    text, entities = html.parse(TelethonHtmlConverter().convert(source, ()))
    assert text == source
    assert entities == []


def test_delimiters_around_formatted_span_survive() -> None:
    source = "Hi friends, see a__b__c <tag> & more"
    converted = TelethonHtmlConverter().convert(source, [MessageEntityBold(offset=3, length=7)])
    assert "&lt;tag&gt;" in converted
    text, entities = html.parse(converted)
    assert text == source
    assert [type(entity) for entity in entities] == [MessageEntityBold]
