"""
repositories/ - Data Access Layer
==================================
One repository per table group: subscriptions, master data and users.
Every query is scoped by the owner's user_id; rows come back as
model dataclasses.
"""
