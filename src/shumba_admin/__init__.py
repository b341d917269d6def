"""
shumba-admin: desktop admin console for the Shumba Wheels driving-school platform.

Architecture:
- Tier 1 (Core): Pagination arithmetic, debounce, task runners, logging setup
- Tier 2 (Protocols): Runtime configuration and the TaskRunner protocol
- Tier 3 (API): HTTP client, response envelopes and the error taxonomy
- Tier 4 (Services): Session, entity registry, search and the remote list controller
- Tier 5 (Widgets): PyQt6 screens bound to list controllers
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
