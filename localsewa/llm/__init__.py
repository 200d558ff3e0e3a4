"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build prompts from a chat message, its detected intent and the matched services.
- Call Groq to phrase a short assistant reply.
- Return nothing when the LLM is unavailable so callers can use a template reply.
"""
