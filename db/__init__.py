"""
db/ - Database Layer
====================
PostgreSQL connection pooling and schema bootstrap for subscriptions,
master data and user settings.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
