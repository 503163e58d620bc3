"""
Engine state and playback state machine module.

Holds the single EngineState struct and the allowed transitions between
IDLE, PLAYING and PAUSED.
"""
