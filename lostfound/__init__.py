"""Lost & Found announcement service package.

Holds the announcement fan-out API: persistence of global announcements and
per-user notifications plus delivery through the push gateway.
"""
