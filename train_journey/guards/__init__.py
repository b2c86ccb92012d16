"""Transition guards.

Every controller operation runs through a validator pipeline here before any
state is touched, so rejected calls leave the journey exactly as it was.
"""
