"""Route context capability consumed by the interaction cache."""

from typing import Protocol, runtime_checkable

from routetrace.core.activity.models import RouteContext


@runtime_checkable
class RouteContextProvider(Protocol):
    """Anything that can report the route active right now.

    Implementations return a value snapshot, or None when no route has
    been established yet.
    """

    def current_route_context(self) -> RouteContext | None: ...
