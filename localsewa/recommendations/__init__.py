"""
Recommendation layer.

Responsibilities:
- Rank listings for a user by rating, popularity, booking history, recency and provider quality.
- List providers for a category ordered by distance from the customer.
- Find the nearest qualified providers around a coordinate with a live smart score.
"""
