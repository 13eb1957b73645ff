"""
Rate limiting for form endpoints.

The Limiter instance is created in semisto/__init__.py with no default
limits; this module limits the endpoints that accept free-text
submissions (the public contact blueprint and the portal contact form).
Disabled in testing mode.
"""

import logging

logger = logging.getLogger(__name__)

# Blueprints limited with CONTACT_RATE_LIMIT.
LIMITED_BLUEPRINTS = ("contact",)

# Single views limited with CONTACT_RATE_LIMIT.
LIMITED_ENDPOINTS = ("portal.send_contact",)


def init_rate_limits(app, limiter):
    if app.config.get("TESTING") or not app.config.get("RATELIMIT_ENABLED", True):
        app.logger.info("Rate limiter disabled")
        return

    rate = app.config.get("CONTACT_RATE_LIMIT", "10/minute")
    for bp_name in LIMITED_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(rate)(bp)

    for endpoint in LIMITED_ENDPOINTS:
        view = app.view_functions.get(endpoint)
        if view:
            app.view_functions[endpoint] = limiter.limit(rate)(view)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured: contact forms %s", rate)
