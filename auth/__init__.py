"""
auth — User authentication module.

Provides:
  • Password hashing (bcrypt, per-password salt)
  • Signed, time-bounded session tokens (HMAC-SHA256)
  • Register / login / token authentication via ``AuthService``
"""
