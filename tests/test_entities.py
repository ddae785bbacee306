from yt_digest.retrieval.entities import decode_entities


def test_named_then_numeric():
    assert decode_entities("a &amp; b &lt;c&gt; &#65;") == "a & b <c> A"


def test_text_without_entities_unchanged():
    text = "plain text, with < and > already decoded & fine"
    assert decode_entities(text) == text
    assert decode_entities(decode_entities(text)) == text


def test_quotes_and_apostrophes():
    assert decode_entities("&quot;it&#39;s&apos;") == '"it\'s\''


def test_hex_reference():
    assert decode_entities("&#x41;&#X42;") == "AB"


def test_malformed_numeric_left_literal():
    assert decode_entities("&#99999999999999999999;") == "&#99999999999999999999;"
    assert decode_entities("&#;") == "&#;"
    assert decode_entities("&#12ab;") == "&#12ab;"


def test_empty():
    assert decode_entities("") == ""
    assert decode_entities(None) == ""
