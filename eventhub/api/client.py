import logging
from typing import Any, Dict, List, Optional, Tuple
import httpx

from ..errors import AuthError, NetworkError, NotFoundError, ValidationError
from ..models.event import Comment, EventDraft, EventRecord
from ..models.user import UserSummary
from ..utils.dates import parse_date, parse_datetime

logger = logging.getLogger(__name__)

# Endpoints where any 4xx answer means the credentials were rejected
AUTH_ENDPOINTS = ('/api/auth/login', '/api/auth/register')

class EventAPIClient:
    """Async client for the event-management API."""

    def __init__(self, base_url: str, timeout: float = 30, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.transport = transport
        # Bearer token attached to every request while set
        self.credential: Optional[str] = None

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send a request to the API and return the decoded JSON body.

        Returns:
            The decoded JSON body, or None for an empty response

        Raises:
            AuthError: If the API rejects the credentials
            NotFoundError: If the resource does not exist
            NetworkError: If the API is unreachable or answers with another error
        """
        headers = {'Accept': 'application/json'}
        if self.credential:
            headers['Authorization'] = f"Bearer {self.credential}"

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self.transport
            ) as client:
                response = await client.request(method, path, **kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._convert_error(path, e.response) from e
        except httpx.RequestError as e:
            logger.error(f"Failed to reach API for {method} {path}: {e}")
            raise NetworkError(f"Could not reach the API: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON in API response for {method} {path}", response.status_code) from e

    def _convert_error(self, path: str, response: httpx.Response) -> Exception:
        """Map an error response to the matching exception."""
        status = response.status_code
        message = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get('message')
        except ValueError:
            pass

        if status in (401, 403) or (path in AUTH_ENDPOINTS and 400 <= status < 500):
            logger.info(f"API rejected credentials for {path} ({status})")
            return AuthError(message or 'Invalid credentials', status)
        if status == 404:
            return NotFoundError(message or 'Not found', status)
        logger.error(f"API request to {path} failed with status {status}: {message}")
        return NetworkError(message or f"API request failed with status {status}", status)

    # Authentication

    async def login(self, email: str, password: str) -> Tuple[str, UserSummary]:
        data = await self._request('POST', '/api/auth/login', json={'email': email, 'password': password})
        return self._convert_auth_response(data)

    async def register(self, fields: Dict[str, Any]) -> Tuple[str, UserSummary]:
        data = await self._request('POST', '/api/auth/register', json=fields)
        return self._convert_auth_response(data)

    async def get_current_user(self) -> UserSummary:
        """Validate the current credential and return its user ("who am I")."""
        data = await self._request('GET', '/api/auth/me')
        if not isinstance(data, dict):
            raise NetworkError("API response must be a user object")
        return self._convert_to_user(data)

    # Events

    async def get_events(self) -> List[EventRecord]:
        """Fetch the events visible to the logged in user."""
        return self._convert_to_events(await self._request('GET', '/api/events'))

    async def get_public_events(self) -> List[EventRecord]:
        return self._convert_to_events(await self._request('GET', '/api/events/public'))

    async def get_event(self, event_id: str) -> EventRecord:
        return self._convert_to_event(await self._request('GET', f'/api/events/{event_id}'))

    async def get_public_event(self, event_id: str) -> EventRecord:
        return self._convert_to_event(await self._request('GET', f'/api/events/public/{event_id}'))

    async def create_event(self, draft: EventDraft) -> EventRecord:
        draft.validate()
        data = await self._request('POST', '/api/events', json=draft.to_payload())
        logger.info(f"Created event {data.get('_id') if isinstance(data, dict) else '?'}")
        return self._convert_to_event(data)

    async def update_event(self, event_id: str, draft: EventDraft) -> EventRecord:
        draft.validate()
        data = await self._request('PUT', f'/api/events/{event_id}', json=draft.to_payload())
        logger.info(f"Updated event {event_id}")
        return self._convert_to_event(data)

    async def delete_event(self, event_id: str) -> None:
        await self._request('DELETE', f'/api/events/{event_id}')
        logger.info(f"Deleted event {event_id}")

    async def attend_event(self, event_id: str) -> None:
        await self._request('POST', f'/api/events/{event_id}/attend', json={})

    async def add_comment(self, event_id: str, content: str) -> None:
        if not content or not content.strip():
            raise ValidationError({'content': 'required'})
        await self._request('POST', f'/api/events/{event_id}/comments', json={'content': content.strip()})

    async def upload_image(self, filename: str, data: bytes, content_type: str) -> str:
        """
        Upload an event image.

        Returns:
            str: URL of the stored image

        Raises:
            ValidationError: If the file is not an image
        """
        if not content_type or not content_type.startswith('image/'):
            raise ValidationError({'image': 'please upload an image file'})
        body = await self._request('POST', '/api/upload', files={'image': (filename, data, content_type)})
        if not isinstance(body, dict) or not body.get('url'):
            raise NetworkError("Upload response did not contain an image URL")
        return body['url']

    # Conversion

    def _convert_auth_response(self, data: Any) -> Tuple[str, UserSummary]:
        if not isinstance(data, dict) or not data.get('token') or not isinstance(data.get('user'), dict):
            raise NetworkError("Authentication response must contain a token and a user")
        return data['token'], self._convert_to_user(data['user'])

    def _convert_to_user(self, data: Any) -> UserSummary:
        """
        Convert API user data to a UserSummary.

        Unpopulated references arrive as bare id strings.
        """
        if isinstance(data, str):
            return UserSummary(id=data)
        if not isinstance(data, dict):
            raise NetworkError(f"Invalid user data in API response: {data!r}")
        user_id = data.get('_id', data.get('id'))
        if user_id is None:
            raise NetworkError("User data in API response has no id")
        return UserSummary(id=str(user_id), name=data.get('name'), email=data.get('email'))

    def _convert_to_events(self, data: Any) -> List[EventRecord]:
        if not isinstance(data, list):
            raise NetworkError("API response must be a list of events")
        return [self._convert_to_event(event) for event in data]

    def _convert_to_event(self, data: Any) -> EventRecord:
        """
        Convert API event data to an EventRecord.

        Args:
            data: Dictionary containing event data from the API

        Returns:
            EventRecord: Event object

        Raises:
            NetworkError: If required fields are missing
        """
        if not isinstance(data, dict):
            raise NetworkError("API response must be an event object")

        # Ensure required fields are present
        event_id = data.get('_id', data.get('id'))
        if event_id is None or 'title' not in data:
            raise NetworkError("Event data in API response is missing its id or title")

        # Malformed dates are kept as None so the event can still be listed
        event_date = None
        try:
            event_date = parse_date(data.get('date'))
        except ValueError as e:
            logger.warning(f"Invalid date for event {event_id}: {e}")

        try:
            max_attendees = int(data.get('maxAttendees') or 0)
        except (TypeError, ValueError):
            logger.warning(f"Invalid maxAttendees for event {event_id}: {data.get('maxAttendees')!r}")
            max_attendees = 0

        # Attendees are unique by id; unreadable entries are skipped
        attendees = []
        seen = set()
        for attendee in data.get('attendees') or []:
            try:
                user = self._convert_to_user(attendee)
            except NetworkError as e:
                logger.warning(f"Skipping attendee of event {event_id}: {e}")
                continue
            if user.id not in seen:
                seen.add(user.id)
                attendees.append(user)

        creator = None
        if data.get('creator'):
            try:
                creator = self._convert_to_user(data['creator'])
            except NetworkError as e:
                logger.warning(f"Ignoring creator of event {event_id}: {e}")

        return EventRecord(
            id=str(event_id),
            title=data['title'],
            description=data.get('description') or '',
            date=event_date,
            time=data.get('time'),
            location=data.get('location'),
            category=data.get('category'),
            max_attendees=max_attendees,
            attendees=attendees,
            creator=creator,
            image_url=data.get('imageUrl') or None,
            comments=[self._convert_to_comment(comment) for comment in data.get('comments') or []]
        )

    def _convert_to_comment(self, data: Any) -> Comment:
        if not isinstance(data, dict):
            raise NetworkError("Invalid comment data in API response")
        created_at = None
        if data.get('createdAt'):
            try:
                created_at = parse_datetime(data['createdAt'])
            except (ValueError, AttributeError) as e:
                logger.warning(f"Invalid createdAt for comment: {e}")
        user = None
        if data.get('user'):
            try:
                user = self._convert_to_user(data['user'])
            except NetworkError as e:
                logger.warning(f"Ignoring author of comment: {e}")
        return Comment(
            content=data.get('content') or '',
            user=user,
            created_at=created_at
        )
