"""
Frontends - entry points wiring a session to a concrete operator interface.
"""
