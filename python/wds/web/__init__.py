"""
Helpers for the HTTP-facing side of a data service: request-parameter extraction, Accept-header
handling, and per-node output-format negotiation.
"""
