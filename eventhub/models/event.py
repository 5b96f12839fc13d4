"""Event model definitions."""

import datetime
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from .user import UserSummary
from ..errors import ValidationError
from ..utils.dates import parse_date

# Categories the API knows about
CATEGORIES = ('conference', 'workshop', 'social', 'other')

@dataclass
class Comment:
    """A comment posted on an event page."""
    content: str
    user: Optional[UserSummary] = None
    created_at: Optional[datetime.datetime] = None

@dataclass
class EventRecord:
    """
    Event as returned by the API.

    Fields:
        id: Unique identifier (the API's `_id`)
        title: Event title
        description: Event description
        date: Calendar date of the event; None when the API value is missing or malformed
        time: Time of day as entered by the creator (free text, e.g. '18:30')
        location: Where the event takes place
        category: One of CATEGORIES under correct server behaviour, kept verbatim (or None) otherwise
        max_attendees: Capacity of the event
        attendees: Users attending, unique by id
        creator: User that created the event (optional, not always populated)
        image_url: URL to the event's image (optional)
        comments: Comments posted on the event page
    """
    id: str
    title: str
    description: str = ''
    date: Optional[datetime.date] = None
    time: Optional[str] = None
    location: Optional[str] = None
    category: Optional[str] = None
    max_attendees: int = 0
    attendees: List[UserSummary] = field(default_factory=list)
    creator: Optional[UserSummary] = None
    image_url: Optional[str] = None
    comments: List[Comment] = field(default_factory=list)

    @property
    def attendee_count(self) -> int:
        return len(self.attendees)

    @property
    def is_full(self) -> bool:
        """Whether the displayed attendee count has reached the capacity."""
        return self.max_attendees > 0 and self.attendee_count >= self.max_attendees

    def is_created_by(self, user: Optional[UserSummary]) -> bool:
        if user is None or self.creator is None:
            return False
        return str(self.creator.id) == str(user.id)

    def is_attended_by(self, user: Optional[UserSummary]) -> bool:
        if user is None:
            return False
        return any(str(attendee.id) == str(user.id) for attendee in self.attendees)

    def can_attend(self, user: Optional[UserSummary]) -> bool:
        """Whether the attend action should be offered to `user`."""
        return (
            user is not None
            and not self.is_created_by(user)
            and not self.is_attended_by(user)
            and not self.is_full
        )

    def to_summary_string(self) -> str:
        when = self.date.isoformat() if self.date else 'unknown date'
        if self.time:
            when = f"{when} at {self.time}"
        return f"[{self.id}] {self.title} ({self.category or 'uncategorized'}) - {when} - {self.attendee_count}/{self.max_attendees} attending"

    def to_detailed_string(self) -> str:
        lines = [
            f"Title: {self.title}",
            f"ID: {self.id}",
            f"Category: {self.category or 'uncategorized'}",
            f"Date: {self.date.isoformat() if self.date else 'unknown'}",
            f"Time: {self.time or 'unknown'}",
            f"Location: {self.location or 'unknown'}",
            f"Organizer: {self.creator.name if self.creator and self.creator.name else 'Unknown'}",
            f"Attendees: {self.attendee_count}/{self.max_attendees}",
        ]
        if self.image_url:
            lines.append(f"Image: {self.image_url}")
        lines.append(f"Description: {self.description}")
        for comment in self.comments:
            author = comment.user.name if comment.user and comment.user.name else 'Unknown'
            lines.append(f"  - {author}: {comment.content}")
        return '\n'.join(lines)

@dataclass
class EventDraft:
    """Form data for creating or editing an event."""
    title: str = ''
    description: str = ''
    date: Any = None
    time: str = ''
    location: str = ''
    category: str = 'other'
    max_attendees: Any = None
    image_url: str = ''

    REQUIRED_FIELDS = ('title', 'description', 'date', 'time', 'location', 'category', 'max_attendees')

    @classmethod
    def from_event(cls, event: EventRecord) -> 'EventDraft':
        """Pre-fill a draft from an existing event (edit form)."""
        return cls(
            title=event.title,
            description=event.description,
            date=event.date,
            time=event.time or '',
            location=event.location or '',
            category=event.category if event.category in CATEGORIES else 'other',
            max_attendees=event.max_attendees,
            image_url=event.image_url or ''
        )

    def validate(self) -> None:
        """
        Check the draft before it is sent to the API.

        Raises:
            ValidationError: Listing every field with a problem
        """
        problems: Dict[str, str] = {}
        for name in self.REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and not value.strip()):
                problems[name] = 'required'

        if 'date' not in problems:
            try:
                parse_date(self.date)
            except ValueError:
                problems['date'] = 'not a valid date'

        if 'max_attendees' not in problems:
            try:
                capacity = int(self.max_attendees)
            except (TypeError, ValueError):
                problems['max_attendees'] = 'must be a whole number'
            else:
                if capacity <= 0:
                    problems['max_attendees'] = 'must be positive'

        if 'category' not in problems and self.category not in CATEGORIES:
            problems['category'] = f"must be one of {', '.join(CATEGORIES)}"

        if problems:
            raise ValidationError(problems)

    def to_payload(self) -> Dict[str, Any]:
        """Convert the draft to the API's JSON body. Call validate() first."""
        return {
            'title': self.title.strip(),
            'description': self.description.strip(),
            'date': parse_date(self.date).isoformat(),
            'time': self.time.strip(),
            'location': self.location.strip(),
            'category': self.category,
            'maxAttendees': int(self.max_attendees),
            'imageUrl': self.image_url or ''
        }
