"""
Domain layer.

This layer contains:
- Data models (type-safe structures)
- Result types (explicit success/failure handling)
- The registration pipeline composing validators and the mailer
"""
