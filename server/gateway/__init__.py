"""
Chat gateway service.

Forwards user messages, with the context of their current conversation
thread, to a configured LLM provider and records every exchange.
"""
