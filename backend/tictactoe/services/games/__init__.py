"""Game session services: the registry and its expiry sweeper.

Socket handlers and HTTP routes go through these instead of touching
Session objects directly.
"""
from .registry import SessionRegistry
from .scheduler import start_expiry_sweeper

__all__ = ['SessionRegistry', 'start_expiry_sweeper']
