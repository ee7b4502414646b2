import pytest

from greq.errors import ParseError
from greq.json_value import JSONType, JSONValue

DOC = b"""
{
    "form": {"aaa": "123"},
    "args": {"bbb": "312"},
    "tags": ["a", "b", "c"],
    "count": 3,
    "ratio": 0.5,
    "active": true,
    "nothing": null,
    "dotted.key": "yes",
    "items": [{"id": 1}, {"id": 2}]
}
"""


@pytest.fixture
def doc():
    return JSONValue.parse(DOC)


def test_nested_object_path(doc):
    assert doc.get("form.aaa").as_str() == "123"
    assert doc.get("form.aaa").type is JSONType.STRING


def test_array_index_and_length(doc):
    assert doc.get("tags.1") == "b"
    assert doc.get("tags.#").as_int() == 3
    assert doc.get("items.1.id").as_int() == 2


def test_escaped_dot(doc):
    assert doc.get(r"dotted\.key") == "yes"


def test_missing_paths_never_raise(doc):
    missing = doc.get("form.zzz.deeper")

    assert missing.exists is False
    assert missing.type is JSONType.MISSING
    assert missing.value is None
    assert missing.as_str() == ""
    assert not missing
    assert doc.get("tags.9").exists is False
    assert doc.get("count.x").exists is False


def test_types(doc):
    assert doc.get("count").type is JSONType.NUMBER
    assert doc.get("active").type is JSONType.BOOL
    assert doc.get("nothing").type is JSONType.NULL
    assert doc.get("nothing").exists is True
    assert doc.get("tags").type is JSONType.ARRAY
    assert doc.type is JSONType.OBJECT


def test_conversions(doc):
    assert doc.get("form.aaa").as_int() == 123
    assert doc.get("ratio").as_float() == 0.5
    assert doc.get("active").as_bool() is True
    assert doc.get("count").as_str() == "3"
    assert doc.get("form").as_str() == '{"aaa":"123"}'
    assert doc.get("tags.0").as_int(default=-1) == -1
    assert JSONValue("1.5").as_int() == 1
    assert JSONValue("true").as_bool() is True


def test_list_and_dict_views(doc):
    assert [v.as_str() for v in doc.get("tags")] == ["a", "b", "c"]
    assert len(doc.get("tags")) == 3
    assert doc.get("nothing").as_list() == []
    assert doc.get("count").as_list() == [3]
    assert set(doc.get("form").as_dict()) == {"aaa"}
    assert doc.get("tags").as_dict() == {}


def test_getitem(doc):
    assert doc["form.aaa"] == "123"
    assert doc["tags"][-1] == "c"
    assert doc["tags"][5].exists is False


def test_blank_input_is_missing():
    assert JSONValue.parse(b"").exists is False
    assert JSONValue.parse("  \n").exists is False


def test_malformed_input():
    with pytest.raises(ParseError):
        JSONValue.parse('{"a": ')


def test_repr():
    assert repr(JSONValue()) == "JSONValue(<missing>)"
    assert repr(JSONValue("x")) == "JSONValue(string: 'x')"


def test_non_ascii_digit_segments_are_missing(doc):
    assert doc.get("tags.²").exists is False
    assert doc.get("tags.١").exists is False
    assert doc.get("items.-1").exists is False


def test_non_finite_and_huge_numbers_fall_back_to_default():
    value = JSONValue.parse(b'{"inf": Infinity, "nan": NaN, "big": 1e400, "huge": ' + b"9" * 400 + b"}")

    assert value.get("inf").as_int(default=-1) == -1
    assert value.get("nan").as_int(default=-1) == -1
    assert value.get("big").as_int(default=-1) == -1
    assert value.get("huge").as_float(default=-1.0) == -1.0
    assert JSONValue("1e400").as_int(default=7) == 7
    assert value.get("huge").as_int() == int("9" * 400)
