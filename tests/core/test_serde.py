from timechart.core.serde import json_dumps_canonical, json_loads


def test_json_dumps_canonical_sorted_and_unicode_kept() -> None:
    obj1 = {"b": 2, "a": 1, "nested": {"y": 2, "x": 1}, "heading": "Zeit — Ü"}
    obj2 = {"nested": {"x": 1, "y": 2}, "a": 1, "heading": "Zeit — Ü", "b": 2}
    s1 = json_dumps_canonical(obj1)
    assert s1 == json_dumps_canonical(obj2)
    assert "Ü" in s1
    assert " " not in s1.replace("Zeit — Ü", "")


def test_serde_roundtrip() -> None:
    obj = {"k": [1, -2, 3], "m": {"n": None}}
    assert json_loads(json_dumps_canonical(obj)) == obj
