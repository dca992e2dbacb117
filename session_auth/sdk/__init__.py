"""
SDK - Stateful session components and the high-level client.
"""
