"""
Auth Service

Session/identity adapter over the hosted identity provider:
- E-mail/password sign-in, sign-up and sign-out
- Password reset e-mails and password updates
- Session refresh and current-user lookup

Port: 8201
"""

__version__ = "1.0.0"
__service__ = "auth_service"
