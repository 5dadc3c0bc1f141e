"""Adapters layer - concrete implementations of port interfaces.

Only outbound adapters exist: the library is driven in-process through
EmbeddedPostgres, so there is no inbound transport.
"""
