"""
Stateless helpers for a web application.

Validation, escaping, filesystem, request/response, translation, SQL
script and email helpers, plus a Lambda entrypoint that composes them.
"""

__version__ = '1.0.0'
