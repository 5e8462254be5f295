"""
Domain exceptions for analytics app.

Exception Hierarchy:
    AnalyticsServiceError (base)
    └── InvalidDateRangeError

Usage:
    from apps.analytics.exceptions import InvalidDateRangeError

    if start_date > end_date:
        raise InvalidDateRangeError("start_date must not be after end_date")
"""


class AnalyticsServiceError(Exception):
    """
    Base exception for all analytics errors.

        try:
            data = HotelAnalytics.revenue(tenant=hotel, start_date=start, end_date=end)
        except AnalyticsServiceError as e:
            return Response({'error': str(e)}, status=400)
    """

    pass


class InvalidDateRangeError(AnalyticsServiceError):
    """Raised when a report range is reversed or too long."""

    pass
