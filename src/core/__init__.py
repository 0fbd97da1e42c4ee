"""Core domain package for greeter.

Core contains the per-chat greeting state machine, the greeting store, and the
service that orchestrates them, without any Telegram or filesystem-specific
code, keeping the business logic portable.
"""
