"""Filtering of already-fetched event lists (dashboard search and filters)."""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..models.event import CATEGORIES, EventRecord
from ..models.user import UserSummary
from .dates import parse_date

logger = logging.getLogger(__name__)

ALL = 'all'
RELATIONS = (ALL, 'created', 'attending')

@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range; either end may be open."""
    start: Optional[datetime.date] = None
    end: Optional[datetime.date] = None

    def contains(self, day: Optional[datetime.date]) -> bool:
        if self.start is None and self.end is None:
            return True
        if day is None:
            return False
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

@dataclass(frozen=True)
class FilterCriteria:
    """
    Criteria for narrowing an event list.

    Fields:
        search_term: Case-insensitive text looked up in title and description
        category: One of CATEGORIES, or 'all'
        relation: 'all', 'created' (events the current user created) or
                 'attending' (events the current user attends)
        date_range: Inclusive date bounds
    """
    search_term: str = ''
    category: str = ALL
    relation: str = ALL
    date_range: DateRange = field(default_factory=DateRange)

    def __post_init__(self):
        if self.category != ALL and self.category not in CATEGORIES:
            raise ValueError(f"Unknown category filter: {self.category}")
        if self.relation not in RELATIONS:
            raise ValueError(f"Unknown relation filter: {self.relation}")

    @classmethod
    def from_args(
        cls,
        search: Optional[str] = None,
        category: Optional[str] = None,
        relation: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None
    ) -> 'FilterCriteria':
        """
        Build criteria from raw query-string or command-line values.

        Blank values mean "not set".

        Raises:
            ValueError: If a category, relation or date is not recognised
        """
        return cls(
            search_term=(search or '').strip(),
            category=(category or '').strip() or ALL,
            relation=(relation or '').strip() or ALL,
            date_range=DateRange(start=parse_date(start), end=parse_date(end))
        )

    @property
    def is_active(self) -> bool:
        """Whether any criterion narrows the list."""
        return bool(
            self.search_term
            or self.category != ALL
            or self.relation != ALL
            or self.date_range.start
            or self.date_range.end
        )

    def describe(self) -> List[str]:
        """Human readable list of the active filters."""
        active = []
        if self.search_term:
            active.append(f'Search term: "{self.search_term}"')
        if self.category != ALL:
            active.append(f"Category: {self.category}")
        if self.relation != ALL:
            active.append(f"Showing: {'Created by me' if self.relation == 'created' else 'Attending'}")
        if self.date_range.start:
            active.append(f"From: {self.date_range.start.isoformat()}")
        if self.date_range.end:
            active.append(f"To: {self.date_range.end.isoformat()}")
        return active

def matches_search(event: EventRecord, search_term: str) -> bool:
    if not search_term:
        return True
    needle = search_term.lower()
    return needle in (event.title or '').lower() or needle in (event.description or '').lower()

def matches_category(event: EventRecord, category: str) -> bool:
    if category == ALL:
        return True
    return event.category in CATEGORIES and event.category == category

def matches_relation(event: EventRecord, relation: str, current_user: Optional[UserSummary]) -> bool:
    if relation == ALL:
        return True
    if current_user is None:
        return False
    if relation == 'created':
        return event.is_created_by(current_user)
    if relation == 'attending':
        return event.is_attended_by(current_user)
    return False

def event_matches(event: EventRecord, criteria: FilterCriteria, current_user: Optional[UserSummary]) -> bool:
    """Check a single event against every criterion."""
    return (
        matches_search(event, criteria.search_term)
        and matches_category(event, criteria.category)
        and matches_relation(event, criteria.relation, current_user)
        and criteria.date_range.contains(event.date)
    )

def filter_events(
    events: Iterable[EventRecord],
    criteria: FilterCriteria,
    current_user: Optional[UserSummary] = None
) -> List[EventRecord]:
    """
    Return the events matching all criteria, in their original order.

    The inputs are not modified. When no user is given, the 'created' and
    'attending' relations match nothing.
    """
    if criteria.relation != ALL and current_user is None:
        return []
    filtered = [event for event in events if event_matches(event, criteria, current_user)]
    logger.debug(f"Filter kept {len(filtered)} events for {criteria}")
    return filtered
