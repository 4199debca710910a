import xml.etree.ElementTree as ET

from timechart.core.events import Actor, Event, EventStore, Instant, Span
from timechart.render.options import RenderOptions
from timechart.render.style import INDICATOR_SCRIPT, STYLESHEET, indicator_script
from timechart.render.svg import build_document, fmt_num, to_bytes


def scenario_store() -> EventStore:
    store = EventStore()
    store.register_actor(Actor(identity="A", tooltip="actor A"))
    store.register_actor(Actor(identity="B"))
    store.add_event(
        "A",
        Event(
            kind=Span(start=1_500_000, duration=750_000),
            fields={"fill": "#AB7C94", "class": "hot"},
            tooltip="busy",
        ),
    )
    store.add_event("B", Event(kind=Span(start=-5_000_000, duration=2_000_000)))
    store.add_event("B", Event(kind=Instant(at=-1_000_000), fields={"fill": "red"}))
    return store


def test_document_root_and_layer_order() -> None:
    root = build_document(RenderOptions(heading="Boot\nsecond"), scenario_store(), state=" {} ")
    assert root.tag == "svg"
    assert root.get("width") == "765"
    assert root.get("height") == "140"

    children = list(root)
    assert children[0].tag is ET.Comment
    assert children[0].text == " {} "
    assert children[1].tag == "defs"
    assert children[1].find("style").text == STYLESHEET
    assert [c.get("class") for c in children[2:4]] == ["heading", "heading"]
    assert [c.text for c in children[2:4]] == ["Boot", "second"]
    assert children[4].tag == "g"
    assert children[4].get("transform") == "translate(520, 80)"


def test_no_state_means_no_comment() -> None:
    root = build_document(RenderOptions(), EventStore())
    assert all(c.tag is not ET.Comment for c in root)


def test_actor_groups_shapes_and_labels() -> None:
    root = build_document(RenderOptions(), scenario_store())
    timeline = root.find("g")
    actors = timeline.findall("g[@class='actor']")
    assert len(actors) == 2

    b_group, a_group = actors
    assert [t.text for t in b_group.findall("text")] == ["B"]
    assert a_group.find("title").text == "actor A"

    rect = a_group.find("rect")
    assert rect.get("fill") == "#AB7C94"
    assert rect.get("class") == "hot span"
    assert (rect.get("x"), rect.get("y"), rect.get("width"), rect.get("height")) == (
        "150",
        "20.5",
        "75",
        "19",
    )
    assert rect.find("title").text == "busy"
    assert a_group.find("text").get("class") == "right"

    marker = b_group.find("polygon")
    assert marker.get("class") == "instant"
    assert marker.get("fill") == "red"
    assert marker.get("points") == "-100,0.5 -90.5,10 -100,19.5 -109.5,10"


def test_grid_layer_labels_only_majors() -> None:
    root = build_document(RenderOptions(), scenario_store())
    timeline = root.find("g")
    labels = timeline.findall("text[@class='label']")
    paths = timeline.findall("path")
    sublines = timeline.findall("path[@class='subline']")

    assert [t.text for t in labels][:2] == ["-5.000000", "-4.000000"]
    assert "2.000000" in [t.text for t in labels]
    assert len(labels) == 9
    assert len(paths) == 9 + 72
    assert len(sublines) == 72
    assert all(t.get("y") == "-5" for t in labels)
    assert paths[0].get("d") == "M-500,0 l0,40 z"


def test_to_bytes_has_declaration_and_escapes_text() -> None:
    root = build_document(RenderOptions(heading="a < b & c"), EventStore())
    data = to_bytes(root)
    assert data.startswith(b"<?xml")
    assert b"a &lt; b &amp; c" in data
    assert ET.fromstring(data).tag.endswith("svg")


def test_fmt_num() -> None:
    assert fmt_num(20.0) == "20"
    assert fmt_num(-0.0) == "0"
    assert fmt_num(0.5) == "0.5"
    assert fmt_num(7) == "7"


def test_indicator_follows_timeline_and_carries_layout_constants() -> None:
    root = build_document(RenderOptions(heading="Boot\nsecond"), scenario_store(), state=" {} ")
    children = list(root)
    timeline_at = next(i for i, c in enumerate(children) if c.tag == "g")
    line, label, script = children[timeline_at + 1 :]

    assert line.tag == "rect"
    assert (line.get("id"), line.get("class")) == ("indicator", "indicator")
    assert (line.get("y"), line.get("height"), line.get("width")) == ("80", "40", "1")
    assert label.tag == "text"
    assert label.get("id") == "indicator-text"
    assert label.text is None

    assert script.tag == "script"
    source = script.text
    assert "const HEADING_HEIGHT = 80;" in source
    assert "const LEFT_OFFSET = 520;" in source
    assert "const US_PER_PIXEL = 10000;" in source
    assert "__" not in source


def test_indicator_script_substitution() -> None:
    source = indicator_script("42.5", "-7", "250")
    assert source == (
        INDICATOR_SCRIPT.replace("__HEADING_HEIGHT__", "42.5")
        .replace("__LEFT_OFFSET__", "-7")
        .replace("__US_PER_PIXEL__", "250")
    )
    assert "(x - LEFT_OFFSET) * US_PER_PIXEL" in source


def test_indicator_script_survives_serialization() -> None:
    data = to_bytes(build_document(RenderOptions(us_per_pixel=1000), EventStore()))
    parsed = ET.fromstring(data)
    script = parsed.find("{http://www.w3.org/2000/svg}script")
    assert "const US_PER_PIXEL = 1000;" in script.text
    assert "size < 1000" in script.text
