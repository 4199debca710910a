"""
Pydantic v2 models for actors, events, and the event store.

Responsibilities
- Define the typed records persisted inside a rendered chart (Actor, Event, Span, Instant).
- Own all actors and their events in EventStore, enforcing identity and ordering invariants.
- Validate recovered stores so that a decoded artifact cannot smuggle in a broken model.
- Restrict every string to what the rendered XML can carry (see timechart.core.grammar).

Ordering
- Events order strictly by ``(start_time, end_time)``; an open-ended span (no end)
  sorts before any determinate end sharing its start.
- Ordering is not identity: each stored event carries its own ``event_id`` and events
  sharing a ``(start_time, end_time)`` pair are all retained, in insertion order.

Style
- Zero-IO (stdlib + pydantic only).
- Mutations go through EventStore.register_actor / add_event / set_actor_tooltip only.

Examples:
    >>> from timechart.core.events import Actor, Event, EventStore, Span
    >>> store = EventStore()
    >>> actor_id = store.register_actor(Actor(identity="kernel"))
    >>> _ = store.add_event(actor_id, Event(kind=Span(start=0, duration=750_000)))
    >>> [e.end_time() for e in store.events_for(actor_id)]
    [750000]
"""

from __future__ import annotations

from bisect import insort
from collections.abc import Iterator
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from .errors import DuplicateActor, StoreInvariantError, UnknownActor
from .grammar import check_xml_name, check_xml_text
from .typing import ActorId

__all__ = [
    "Actor",
    "Instant",
    "Span",
    "EventKind",
    "Event",
    "EventStore",
]


class Actor(BaseModel):
    """
    A named participant in the timeline, drawn as one horizontal lane.

    Attributes:
        identity (str): Unique, non-empty name; doubles as the actor id.
        tooltip (str | None): Optional free text shown on hover; not used in layout.

    Notes:
        Frozen; EventStore.set_actor_tooltip swaps in a copy with a new tooltip.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    identity: str = Field(..., min_length=1)
    tooltip: str | None = None

    @field_validator("identity", "tooltip")
    @classmethod
    def _check_markup(cls, v: str | None, info: ValidationInfo) -> str | None:
        return v if v is None else check_xml_text(v, f"actor {info.field_name}")


class Instant(BaseModel):
    """A single point in time, in signed microseconds."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["instant"] = "instant"
    at: int


class Span(BaseModel):
    """
    A start time and an optional duration, both in microseconds.

    Attributes:
        start (int): Signed start time.
        duration (int | None): Non-negative length; None means open-ended (the span
            extends to the right edge of the rendered box).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["span"] = "span"
    start: int
    duration: int | None = Field(default=None, ge=0)


EventKind = Annotated[Instant | Span, Field(discriminator="kind")]


class Event(BaseModel):
    """
    A single thing that happened to an actor.

    Attributes:
        kind (Instant | Span): Tagged time shape, discriminated by ``kind``.
        fields (dict[str, str]): Presentation attributes merged onto the drawn shape
            (e.g., ``{"fill": "#AB7C94"}``).
        value (str): Free-text label; persisted, not used for placement.
        tooltip (str | None): Optional hover text.
        event_id (int | None): Stable identifier assigned by EventStore.add_event.

    Examples:
        >>> from timechart.core.events import Event, Instant, Span
        >>> Event(kind=Span(start=-5, duration=None)).end_time() is None
        True
        >>> Event(kind=Instant(at=3)).end_time()
        3
    """

    model_config = ConfigDict(extra="forbid")

    kind: EventKind
    fields: dict[str, str] = Field(default_factory=dict)
    value: str = ""
    tooltip: str | None = None
    event_id: int | None = Field(default=None, ge=0)

    @field_validator("fields")
    @classmethod
    def _check_fields(cls, v: dict[str, str]) -> dict[str, str]:
        """
        Require every presentation field to be writable as an SVG attribute.

        Raises:
            MarkupError: If a key is not an attribute name or a value holds a
                character XML cannot carry.
        """
        for key, value in v.items():
            check_xml_name(key, "event field name")
            check_xml_text(value, f"event field {key!r}")
        return v

    @field_validator("value", "tooltip")
    @classmethod
    def _check_markup(cls, v: str | None, info: ValidationInfo) -> str | None:
        return v if v is None else check_xml_text(v, f"event {info.field_name}")

    def start_time(self) -> int:
        if isinstance(self.kind, Span):
            return self.kind.start
        if isinstance(self.kind, Instant):
            return self.kind.at
        raise TypeError(f"unsupported event kind {self.kind!r}")

    def end_time(self) -> int | None:
        if isinstance(self.kind, Span):
            if self.kind.duration is None:
                return None
            return self.kind.start + self.kind.duration
        if isinstance(self.kind, Instant):
            return self.kind.at
        raise TypeError(f"unsupported event kind {self.kind!r}")

    def sort_key(self) -> tuple[int, int, int]:
        """
        Ordering key equivalent to ``(start_time, end_time)`` with None ends first.

        Returns:
            tuple[int, int, int]: (start, has_end, end) where has_end is 0 for open spans.
        """
        end = self.end_time()
        if end is None:
            return (self.start_time(), 0, 0)
        return (self.start_time(), 1, end)


class EventStore(BaseModel):
    """
    Owner of all actors and their events.

    Attributes:
        registry (dict[str, Actor]): Actor id -> Actor. Serialized as ``actors``.
        timeline (dict[str, list[Event]]): Actor id -> events in ascending
            ``(start_time, end_time)`` order. Serialized as ``events``.
        next_event_id (int): Identifier handed to the next added event.

    Invariants:
        - ``registry`` and ``timeline`` have identical key sets (kept in lockstep by
          register_actor).
        - Every registry key equals its actor's identity.
        - Every event list is sorted by Event.sort_key().
        - Event ids are unique and below ``next_event_id``.

    Raises:
        pydantic.ValidationError: Wrapping StoreInvariantError when constructed or
            validated from data that breaks an invariant.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    registry: dict[str, Actor] = Field(default_factory=dict, alias="actors")
    timeline: dict[str, list[Event]] = Field(default_factory=dict, alias="events")
    next_event_id: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_invariants(self) -> EventStore:
        if set(self.registry) != set(self.timeline):
            missing = sorted(set(self.registry) ^ set(self.timeline))
            raise StoreInvariantError(f"actor and event keys out of lockstep: {missing}")
        for key, actor in self.registry.items():
            if key != actor.identity:
                raise StoreInvariantError(
                    f"actor key {key!r} does not match identity {actor.identity!r}"
                )
        seen: set[int] = set()
        for key, events in self.timeline.items():
            keys = [e.sort_key() for e in events]
            if keys != sorted(keys):
                raise StoreInvariantError(f"events for actor {key!r} are not in time order")
            for e in events:
                if e.event_id is None:
                    raise StoreInvariantError(f"event without id under actor {key!r}")
                if e.event_id in seen or e.event_id >= self.next_event_id:
                    raise StoreInvariantError(f"duplicate or out-of-range event id {e.event_id}")
                seen.add(e.event_id)
        return self

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def register_actor(self, actor: Actor) -> ActorId:
        """
        Register a new actor and give it an empty event list.

        Args:
            actor (Actor): Actor to register.

        Returns:
            ActorId: The new actor id (its identity).

        Raises:
            DuplicateActor: If the identity already exists; the store is unchanged.
        """
        actor_id = ActorId(actor.identity)
        if actor_id in self.registry or actor_id in self.timeline:
            raise DuplicateActor(f"Actor already registered: {actor_id!r}")
        self.registry[actor_id] = actor
        self.timeline[actor_id] = []
        return actor_id

    def add_event(self, actor_id: str, event: Event) -> Event:
        """
        Insert an event into an actor's ordered event list.

        Args:
            actor_id (str): Registered actor id.
            event (Event): Event to add; any ``event_id`` it carries is replaced.

        Returns:
            Event: The stored copy, carrying its assigned ``event_id``.

        Raises:
            UnknownActor: If the actor was never registered; nothing is mutated.
            pydantic.ValidationError: If the event was mutated into an invalid state
                after construction; nothing is mutated.

        Notes:
            The stored copy is re-validated and shares no state with `event`.
            Events sharing ``(start_time, end_time)`` with an existing event are kept
            and placed after it.
        """
        events = self._events_list(actor_id)
        stored = Event.model_validate({**event.model_dump(), "event_id": self.next_event_id})
        insort(events, stored, key=Event.sort_key)
        self.next_event_id += 1
        return stored

    def set_actor_tooltip(self, actor_id: str, tooltip: str | None) -> Actor:
        """Replace an actor's tooltip; the new tooltip is validated like any other."""
        actor = self.get_actor(actor_id)
        updated = Actor(identity=actor.identity, tooltip=tooltip)
        self.registry[actor_id] = updated
        return updated

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def all_events(self) -> Iterator[Event]:
        """Yield every event; ordered within an actor, unordered across actors."""
        for events in self.timeline.values():
            yield from events

    def events_for(self, actor_id: str) -> Iterator[Event]:
        """
        Iterate an actor's events in ascending ``(start_time, end_time)`` order.

        Raises:
            UnknownActor: Immediately, if the actor id is absent.
        """
        return iter(self._events_list(actor_id))

    def actors(self) -> Iterator[ActorId]:
        """Yield registered actor ids in lexicographic order."""
        return (ActorId(k) for k in sorted(self.timeline))

    def get_actor(self, actor_id: str) -> Actor:
        try:
            return self.registry[actor_id]
        except KeyError:
            raise UnknownActor(f"Unknown actor id: {actor_id!r}") from None

    def _events_list(self, actor_id: str) -> list[Event]:
        try:
            return self.timeline[actor_id]
        except KeyError:
            raise UnknownActor(f"Unknown actor id: {actor_id!r}") from None
