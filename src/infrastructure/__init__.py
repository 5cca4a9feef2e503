"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: OpenAI Responses API, LangChain chat
models, environment configuration.
Implements the ports declared in domain/. Never imported by agent/ or application/.
"""
