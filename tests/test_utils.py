import xml.etree.ElementTree as ET

from utils import coerce_int, format_number, xml_escape


def test_xml_escape_covers_markup_and_quotes():
    escaped = xml_escape("<Tom & \"Jerry\"'s>")
    assert "<" not in escaped and ">" not in escaped and '"' not in escaped and "'" not in escaped
    assert escaped.startswith("&lt;Tom &amp; &quot;Jerry&quot;")
    root = ET.fromstring(f"<t a='{escaped}'>{escaped}</t>")
    assert root.text == "<Tom & \"Jerry\"'s>"
    assert root.get("a") == "<Tom & \"Jerry\"'s>"


def test_xml_escape_stringifies():
    assert xml_escape(1234) == "1234"


def test_coerce_int_and_format_number():
    assert coerce_int(None) == 0
    assert coerce_int("12") == 12
    assert coerce_int("lots") == 0
    assert coerce_int(float("nan")) == 0
    assert coerce_int(True) == 0
    assert format_number(None) == "0"
    assert format_number(1234567) == "1,234,567"
