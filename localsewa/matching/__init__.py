"""
Matching layer.

Responsibilities:
- Turn short listing and query text into term-frequency vectors.
- Score text relevance with cosine similarity.
- Blend credential and booking signals into a provider smart score.
- Resolve customer-to-provider distances through the locality graph.
"""
