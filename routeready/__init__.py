"""
RouteReady: stateless delivery route planner.
"""
__version__ = "0.1.0"
