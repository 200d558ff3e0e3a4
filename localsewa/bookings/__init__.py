"""
Booking layer.

Responsibilities:
- Validate booking requests at the boundary.
- Detect duplicate and slot conflicts against active bookings.
- Suggest nearby substitute providers when a booking is rejected.
- Enforce the booking status state machine.
"""
