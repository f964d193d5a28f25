"""
Taskpilot - kanban task board with AI-assisted task creation.

Package structure:
- core: config, logging, shared types
- llm: LLM provider abstraction (openai, claude, gemini, custom)
- generation: free text -> task drafts via the active provider
- board: task persistence and column operations
- settings: persisted provider config and system prompt
"""

__version__ = "0.1.0"
