"""
Security headers middleware.

The service only returns JSON and stored uploads, so the policy denies
everything a browser could execute. Uploaded files are additionally served
as attachments-safe content (no sniffing, no framing).

Usage:
    from app.middleware.security_headers import init_security_headers
    init_security_headers(app)
"""

from flask import request

_API_CSP = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'; form-action 'none'"
_UPLOAD_CSP = "default-src 'none'; img-src 'self'; media-src 'self'; sandbox"


def init_security_headers(app):
    """Register after_request handler that injects security headers."""

    @app.after_request
    def _add_security_headers(response):
        csp = _UPLOAD_CSP if request.path.startswith("/uploads/") else _API_CSP
        response.headers.setdefault("Content-Security-Policy", csp)

        # Prevent MIME-type sniffing
        response.headers.setdefault("X-Content-Type-Options", "nosniff")

        # Clickjacking protection
        response.headers.setdefault("X-Frame-Options", "DENY")

        # HTTPS enforcement (ignored over HTTP, but ready for production)
        response.headers.setdefault(
            "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
        )

        response.headers.setdefault("Referrer-Policy", "no-referrer")

        # Remove server identification
        response.headers.pop("Server", None)

        return response
