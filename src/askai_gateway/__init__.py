"""
AskAI gateway package.

Provides:
- OpenAI-compatible /v1/chat/completions and /v1/models over a fixed summary upstream
- Pseudo-streaming of completed summaries as SSE chunk frames
- Edge-style caching of the model catalog
"""
