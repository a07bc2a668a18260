"""
================================================================================
SOCIAL DM - CUSTOM MIDDLEWARE
================================================================================

@file        middleware.py
@description Per-user timezone activation for API timestamps

MODULE PURPOSE
================================================================================
TimezoneMiddleware
   - Activates the authenticated user's timezone for the request
   - Falls back to UTC for anonymous users or invalid timezones
   - Presenters render every timestamp with timezone.localtime(), so
     message and conversation times come back in the caller's zone

DEPENDENCIES
================================================================================
- pytz: Timezone database
- User model with a 'timezone' field

================================================================================
"""

import pytz
from django.utils import timezone


# ============================================================================
# TIMEZONE MIDDLEWARE
# ============================================================================

class TimezoneMiddleware:
    """
    Activate user-specific timezone for datetime rendering.

    Example User Experience:
        User in Abidjan:
            - User.timezone = 'Africa/Abidjan'
            - createdAt rendered as 2026-02-05T09:30:00+00:00

        User in New York:
            - User.timezone = 'America/New_York'
            - createdAt rendered as 2026-02-05T04:30:00-05:00

    Error Handling:
        - pytz.UnknownTimeZoneError: Invalid timezone string → Use UTC
        - AttributeError: User has no timezone attribute → Use UTC
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.user.is_authenticated:
            try:
                timezone.activate(pytz.timezone(request.user.timezone))
            except (pytz.UnknownTimeZoneError, AttributeError):
                timezone.activate(pytz.UTC)
        else:
            timezone.activate(pytz.UTC)

        try:
            return self.get_response(request)
        finally:
            timezone.deactivate()
