"""Room domain services: registry and round scoring.

Everything here is transport-agnostic; the Socket.IO handlers and HTTP
routes import it, keeping connection concerns out of the game rules.
"""
