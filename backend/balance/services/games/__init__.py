"""Game domain services: round resolution and its deferred trigger.

This package contains pure(ish) domain logic that should be imported by
socket handlers, keeping transport concerns separated from the rules of
the game.
"""
