"""User authentication backend.

Registration, login/logout, access/refresh token rotation, password change,
email/phone verification and profile management over a pluggable user store.
"""

__version__ = "0.1.0"
