"""
agent - Request orchestration layer.

Contains tools, workflows, the intent dispatcher, prompts and the
orchestrator that routes one message to capabilities.
Depends on domain/ and application/. Never imports from infrastructure/.
"""
