"""
Rivela - Source Package

A personal-finance self-reflection tool: the user asks a question,
maps their money and mood, and gets rule-based insights plus a simple
before/after projection they can keep in a journal.

DESIGN PRINCIPLES:
1. The insight engine is a pure function of its inputs
2. Validate at the boundary, never inside the engine
3. No silent corrections
4. Every step of an exploration is auditable
5. The journal storage is swappable
"""

__version__ = "1.0.0"
__author__ = "Rivela Team"
