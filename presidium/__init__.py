"""
Presidium: Standing Committee simulation core.

Committee elections, agenda voting and meetings, driven by an evolving
NPC-to-NPC relationship graph.
"""

__version__ = "0.1.0"
