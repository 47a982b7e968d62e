from routetrace.ports.outbound.route_context import RouteContextProvider

__all__ = ["RouteContextProvider"]
