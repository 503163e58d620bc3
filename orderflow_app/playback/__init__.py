"""
Playback module.

Cancellable repeating tick task that advances the bar cursor.
"""
