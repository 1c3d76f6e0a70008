"""Battle Report Engine - Double-blind obscuration bookkeeping"""
from .tracker import ObscurationTracker

__all__ = ["ObscurationTracker"]
