"""Storage layer for Products4U.

Wraps the MongoDB collections behind a small gateway so that request
handlers never touch the driver directly.
"""
