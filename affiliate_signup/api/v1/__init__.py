"""
API v1 package.

Contains versioned API routes for the Affiliate Registration API.
"""

from affiliate_signup.api.v1.routes import router

__all__ = ["router"]
