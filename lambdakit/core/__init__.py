"""Core building blocks for serverless request handlers.

Modules in this package are framework-agnostic: configuration, event
parsing, response envelopes and request validation rules.
"""
