"""Versalles: auth and session boundary of a tabletop RPG community portal."""

from versalles.client.auth_flow import AuthFlow, AuthFlowResult, FlowStage
from versalles.session.codec import SessionCodec, SessionData
from versalles.session.guard import GuardDecision, decide
from versalles.session.routes import RouteClass, RouteEntry, RouteTable

__all__ = [
    "AuthFlow",
    "AuthFlowResult",
    "FlowStage",
    "SessionCodec",
    "SessionData",
    "GuardDecision",
    "decide",
    "RouteClass",
    "RouteEntry",
    "RouteTable",
]
__version__ = "0.1.0"
