"""Step registry - explicit event name -> step registration table."""

from collections.abc import Iterable

from .workflow import StepRegistration


class StepRegistry:
    """Built once at process start and handed to the Orchestrator."""

    def __init__(self, registrations: Iterable[StepRegistration] = ()) -> None:
        self._by_event: dict[str, StepRegistration] = {}
        for registration in registrations:
            self.register(registration)

    def register(self, registration: StepRegistration) -> None:
        for event_name in registration.events:
            existing = self._by_event.get(event_name)
            if existing is not None:
                raise ValueError(
                    f"Event {event_name!r} is already bound to step {existing.name!r}"
                )
            self._by_event[event_name] = registration

    def resolve(self, event_name: str) -> StepRegistration | None:
        return self._by_event.get(event_name)

    @property
    def event_names(self) -> list[str]:
        return sorted(self._by_event)

    def __contains__(self, event_name: object) -> bool:
        return event_name in self._by_event

    def __len__(self) -> int:
        return len(self._by_event)
