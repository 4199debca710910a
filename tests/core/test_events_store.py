import pytest
from pydantic import ValidationError

from timechart.core.errors import DuplicateActor, UnknownActor
from timechart.core.events import Actor, Event, EventStore, Instant, Span


def span(start: int, duration: int | None = None, **kw) -> Event:
    return Event(kind=Span(start=start, duration=duration), **kw)


def test_start_and_end_time_per_kind() -> None:
    assert span(10, 5).start_time() == 10
    assert span(10, 5).end_time() == 15
    assert span(-10).end_time() is None
    assert Event(kind=Instant(at=-3)).start_time() == -3
    assert Event(kind=Instant(at=-3)).end_time() == -3


def test_kind_is_discriminated_on_validate() -> None:
    e = Event.model_validate({"kind": {"kind": "instant", "at": 7}})
    assert isinstance(e.kind, Instant)
    e = Event.model_validate({"kind": {"kind": "span", "start": 1, "duration": None}})
    assert isinstance(e.kind, Span)


def test_negative_duration_rejected() -> None:
    with pytest.raises(ValidationError):
        Span(start=0, duration=-1)


def test_register_actor_returns_identity_and_creates_empty_lane() -> None:
    store = EventStore()
    actor_id = store.register_actor(Actor(identity="kernel"))
    assert actor_id == "kernel"
    assert list(store.events_for(actor_id)) == []
    assert list(store.actors()) == ["kernel"]


def test_duplicate_actor_leaves_store_unchanged() -> None:
    store = EventStore()
    store.register_actor(Actor(identity="a"))
    store.add_event("a", span(0, 1))
    before = store.model_dump()

    with pytest.raises(DuplicateActor):
        store.register_actor(Actor(identity="a", tooltip="again"))

    assert store.model_dump() == before
    assert store.get_actor("a").tooltip is None


def test_unknown_actor_guards_do_not_mutate() -> None:
    store = EventStore()
    store.register_actor(Actor(identity="a"))
    before = store.model_dump()

    with pytest.raises(UnknownActor):
        store.add_event("ghost", span(0, 1))
    with pytest.raises(UnknownActor):
        store.events_for("ghost")
    with pytest.raises(UnknownActor):
        store.get_actor("ghost")

    assert store.model_dump() == before


def test_events_for_sorted_by_start_then_end() -> None:
    store = EventStore()
    store.register_actor(Actor(identity="a"))
    store.add_event("a", span(3, 2))
    store.add_event("a", span(1, 2))
    store.add_event("a", span(1))
    store.add_event("a", Event(kind=Instant(at=1)))

    got = [(e.start_time(), e.end_time()) for e in store.events_for("a")]
    # Open-ended spans sort before determinate ends at the same start
    assert got == [(1, None), (1, 1), (1, 3), (3, 5)]


def test_same_start_and_end_events_are_all_kept() -> None:
    store = EventStore()
    store.register_actor(Actor(identity="a"))
    first = store.add_event("a", span(0, 10, value="first"))
    second = store.add_event("a", span(0, 10, value="second"))

    assert first.event_id != second.event_id
    assert [e.value for e in store.events_for("a")] == ["first", "second"]


def test_event_ids_are_assigned_sequentially() -> None:
    store = EventStore()
    store.register_actor(Actor(identity="a"))
    store.register_actor(Actor(identity="b"))
    ids = [
        store.add_event("b", span(5, 1)).event_id,
        store.add_event("a", span(0, 1, event_id=99)).event_id,
    ]
    assert ids == [0, 1]
    assert store.next_event_id == 2


def test_all_events_is_restartable() -> None:
    store = EventStore()
    for name in ("b", "a"):
        store.register_actor(Actor(identity=name))
        store.add_event(name, span(0, 1))
    assert len(list(store.all_events())) == 2
    assert len(list(store.all_events())) == 2


def test_actors_are_lexicographic() -> None:
    store = EventStore()
    for name in ("zeta", "alpha", "Mid"):
        store.register_actor(Actor(identity=name))
    assert list(store.actors()) == ["Mid", "alpha", "zeta"]


def test_set_actor_tooltip_is_the_only_actor_mutation() -> None:
    store = EventStore()
    store.register_actor(Actor(identity="a"))
    store.set_actor_tooltip("a", "hover me")
    assert store.get_actor("a").tooltip == "hover me"
    with pytest.raises(ValidationError):
        store.get_actor("a").identity = "b"  # frozen


def test_store_validation_rejects_out_of_lockstep_keys() -> None:
    with pytest.raises(ValidationError):
        EventStore.model_validate({"actors": {"a": {"identity": "a"}}, "events": {}})


def test_store_validation_rejects_unsorted_events() -> None:
    data = {
        "actors": {"a": {"identity": "a"}},
        "events": {
            "a": [
                {"kind": {"kind": "span", "start": 5, "duration": 1}, "event_id": 0},
                {"kind": {"kind": "span", "start": 1, "duration": 1}, "event_id": 1},
            ]
        },
        "next_event_id": 2,
    }
    with pytest.raises(ValidationError):
        EventStore.model_validate(data)


def test_store_validation_rejects_mismatched_identity_and_duplicate_ids() -> None:
    with pytest.raises(ValidationError):
        EventStore.model_validate(
            {"actors": {"a": {"identity": "b"}}, "events": {"a": []}}
        )
    dup = {
        "actors": {"a": {"identity": "a"}},
        "events": {
            "a": [
                {"kind": {"kind": "instant", "at": 1}, "event_id": 0},
                {"kind": {"kind": "instant", "at": 2}, "event_id": 0},
            ]
        },
        "next_event_id": 1,
    }
    with pytest.raises(ValidationError):
        EventStore.model_validate(dup)


def test_dump_uses_actors_and_events_keys() -> None:
    store = EventStore()
    store.register_actor(Actor(identity="a"))
    dumped = store.model_dump(mode="json", by_alias=True)
    assert set(dumped) == {"actors", "events", "next_event_id"}
    assert EventStore.model_validate(dumped) == store


def test_stored_event_shares_no_state_with_caller() -> None:
    store = EventStore()
    store.register_actor(Actor(identity="a"))
    mine = Event(kind=Instant(at=0), fields={"fill": "red"})

    stored = store.add_event("a", mine)
    mine.fields["fill"] = "blue"
    mine.value = "changed"

    (kept,) = store.events_for("a")
    assert kept is stored
    assert kept.fields == {"fill": "red"}
    assert kept.value == ""
    assert mine.event_id is None


def test_add_event_revalidates_mutated_event() -> None:
    store = EventStore()
    store.register_actor(Actor(identity="a"))
    mine = Event(kind=Instant(at=0))
    mine.fields["stroke width"] = "2"

    with pytest.raises(ValidationError):
        store.add_event("a", mine)
    assert list(store.events_for("a")) == []
    assert store.next_event_id == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"identity": "bell\x07"},
        {"identity": "ok", "tooltip": "\x1b[1mbold"},
    ],
)
def test_actor_rejects_characters_xml_cannot_carry(kwargs: dict) -> None:
    with pytest.raises(ValidationError):
        Actor(**kwargs)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"fields": {"stroke width": "2"}},
        {"fields": {"xlink:href": "#a"}},
        {"fields": {"fill": "red\x00"}},
        {"value": "\x1b[0m"},
        {"tooltip": "x" + chr(0xFFFE)},
    ],
)
def test_event_rejects_unwritable_fields_and_text(kwargs: dict) -> None:
    with pytest.raises(ValidationError):
        Event(kind=Instant(at=0), **kwargs)


def test_event_accepts_markup_significant_text() -> None:
    e = Event(
        kind=Instant(at=0),
        fields={"stroke-width": "2", "class": "a&b"},
        value="<init> -- \"quoted\"",
        tooltip="line one\nline two",
    )
    assert e.fields["class"] == "a&b"


def test_set_actor_tooltip_validates_text() -> None:
    store = EventStore()
    store.register_actor(Actor(identity="a", tooltip="before"))
    with pytest.raises(ValidationError):
        store.set_actor_tooltip("a", "\x07")
    assert store.get_actor("a").tooltip == "before"
