"""
Provider-specific phrases the bot looks for in page text.
"""

from meetbot.models import MeetingProvider

MICROSOFT_REQUEST_DENIED = "Sorry, but you were denied access to the meeting"

GOOGLE_REQUEST_DENIED = "Someone in call denied your request to join"

ZOOM_REQUEST_DENIED = "You have been removed"

TELEMOST_REQUEST_DENIED = "Доступ запрещен"

REQUEST_DENIED_PHRASES = {
    MeetingProvider.GOOGLE: GOOGLE_REQUEST_DENIED,
    MeetingProvider.MICROSOFT: MICROSOFT_REQUEST_DENIED,
    MeetingProvider.ZOOM: ZOOM_REQUEST_DENIED,
    MeetingProvider.TELEMOST: TELEMOST_REQUEST_DENIED,
}
