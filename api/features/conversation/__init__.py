"""Conversation feature package: chat orchestration, stores, controller, and router.

Conversations and their messages live in PostgreSQL through SQLAlchemy
entities; replies come from an OpenAI-compatible completion endpoint.
"""
