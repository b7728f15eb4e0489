from flask_talisman import Talisman

def init_security(app):
    """
    Staging/production security headers. The tagging UI is plain forms, so the
    CSP stays self-only; templates carry no inline JS.
    """
    csp = {
        "default-src": ["'self'"],
        "script-src":  ["'self'"],
        "style-src":   ["'self'"],
        "img-src":     ["'self'", "data:"],
        "font-src":    ["'self'", "data:"],
        "connect-src": ["'self'"],
        "frame-ancestors": ["'none'"],
        "base-uri":    ["'self'"],
        "form-action": ["'self'"],
    }

    Talisman(
        app,
        content_security_policy=csp,
        force_https=True,
        strict_transport_security=True,
        session_cookie_secure=True,
        frame_options="DENY",
        referrer_policy="same-origin",
    )
