"""
auth — session resolution.

Provides:
  • Signed session tokens (HMAC-SHA256) carrying the user's email
  • ``get_session_user`` / ``get_request_context`` FastAPI dependencies
  • ``/me`` and ``/logout`` routes
"""
