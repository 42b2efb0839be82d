"""
Committee systems.

Stateful services that sequence the rules and mutate committee and graph
state. Each takes optional config, random source and event bus.
"""

from .relationships import RelationshipSystem
from .elections import ElectionService, ElectionResult
from .voting import VotingEngine, ItemResult
from .meetings import MeetingOrchestrator, MeetingResult, LoyaltyAssessment

__all__ = [
    "RelationshipSystem",
    "ElectionService",
    "ElectionResult",
    "VotingEngine",
    "ItemResult",
    "MeetingOrchestrator",
    "MeetingResult",
    "LoyaltyAssessment",
]
