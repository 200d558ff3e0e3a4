"""
In-memory persistence for providers, listings and bookings.

Responsibilities:
- Load the seed provider and listing tables from CSV.
- Answer category, proximity, status and time-slot queries.
- Insert bookings atomically per (provider, date, time) active slot.
- Keep each provider's derived smart score in step with its inputs.
"""
