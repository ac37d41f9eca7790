"""
Liveness-checked face attendance core.

This package provides:
- Blink / head-movement liveness tracking over a stream of face detections
- A geometric anti-spoofing heuristic (face size and position stability)
- Nearest-neighbour identity matching against an enrolled gallery
- A session orchestrator that sequences capture, liveness and matching
"""

__version__ = "1.0.0"

__all__ = [
    'vision',
    'inference',
    'attendance',
    'web',
]
