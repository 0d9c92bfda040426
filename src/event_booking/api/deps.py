"""
Dependencies resolving the services attached to the application at startup
"""
from fastapi import Request

from event_booking.services import BookingService, EventService, GoogleOAuthClient, UserService


def get_booking_service(request: Request) -> BookingService:
    return request.app.state.booking_service


def get_event_service(request: Request) -> EventService:
    return request.app.state.event_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_oauth_client(request: Request) -> GoogleOAuthClient:
    return request.app.state.oauth_client
