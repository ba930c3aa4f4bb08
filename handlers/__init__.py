"""
handlers/ - Presentation Layer
================================
Telegram command handlers for subscriptions, dashboards, exports and
saved master data. Each handler parses the chat command, delegates to a
Service, and formats the reply. Business rules stay in services/ and utils/.
"""
