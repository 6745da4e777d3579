"""Adapters: persistence, database bootstrap and the AI client."""
