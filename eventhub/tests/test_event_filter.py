from datetime import date

import pytest

from eventhub.models.event import EventRecord
from eventhub.models.user import UserSummary
from eventhub.utils.event_filter import DateRange, FilterCriteria, filter_events

ALICE = UserSummary(id='u1', name='Alice')
BOB = UserSummary(id='u2', name='Bob')
CAROL = UserSummary(id='u3', name='Carol')

def make_event(event_id, **fields):
    defaults = {
        'title': f"Event {event_id}",
        'description': '',
        'date': date(2024, 6, 1),
        'category': 'social',
        'max_attendees': 10,
        'creator': ALICE,
    }
    defaults.update(fields)
    return EventRecord(id=event_id, **defaults)

@pytest.fixture
def events():
    return [
        make_event('1', title='Python Workshop', description='Hands-on asyncio', category='workshop',
                   date=date(2024, 6, 1), creator=ALICE, attendees=[BOB]),
        make_event('2', title='Summer Party', description='Drinks on the roof', category='social',
                   date=date(2024, 6, 15), creator=BOB, attendees=[ALICE, CAROL]),
        make_event('3', title='PyCon Recap', description='What we learned at the conference', category='conference',
                   date=date(2024, 7, 1), creator=ALICE),
        make_event('4', title='Mystery', description=None, category='party', date=None, creator=CAROL),
    ]

def ids(events):
    return [event.id for event in events]

def test_default_criteria_keep_everything_in_order(events):
    assert ids(filter_events(events, FilterCriteria(), None)) == ['1', '2', '3', '4']

def test_search_matches_title_or_description_case_insensitively(events):
    assert ids(filter_events(events, FilterCriteria(search_term='PYTHON'), None)) == ['1']
    assert ids(filter_events(events, FilterCriteria(search_term='roof'), None)) == ['2']
    assert ids(filter_events(events, FilterCriteria(search_term='conference'), None)) == ['3']

def test_search_with_missing_description_does_not_raise(events):
    assert ids(filter_events(events, FilterCriteria(search_term='myst'), None)) == ['4']
    assert filter_events(events, FilterCriteria(search_term='nothing like this'), None) == []

def test_category_filter_requires_exact_known_category(events):
    assert ids(filter_events(events, FilterCriteria(category='social'), None)) == ['2']
    assert ids(filter_events(events, FilterCriteria(category='other'), None)) == []

def test_unknown_event_category_only_matches_all(events):
    assert '4' in ids(filter_events(events, FilterCriteria(category='all'), None))
    for category in ('conference', 'workshop', 'social', 'other'):
        assert '4' not in ids(filter_events(events, FilterCriteria(category=category), None))

def test_event_without_category_only_matches_all():
    uncategorized = make_event('5', category=None)
    assert filter_events([uncategorized], FilterCriteria(), None) == [uncategorized]
    for category in ('conference', 'workshop', 'social', 'other'):
        assert filter_events([uncategorized], FilterCriteria(category=category), None) == []

def test_relation_created(events):
    assert ids(filter_events(events, FilterCriteria(relation='created'), ALICE)) == ['1', '3']
    assert ids(filter_events(events, FilterCriteria(relation='created'), BOB)) == ['2']

def test_relation_attending(events):
    assert ids(filter_events(events, FilterCriteria(relation='attending'), ALICE)) == ['2']
    assert ids(filter_events(events, FilterCriteria(relation='attending'), CAROL)) == ['2']

@pytest.mark.parametrize('relation', ['created', 'attending'])
def test_relation_without_user_matches_nothing(events, relation):
    assert filter_events(events, FilterCriteria(relation=relation), None) == []

def test_relation_all_is_independent_of_user(events):
    criteria = FilterCriteria(search_term='p', category='all')
    expected = ids(filter_events(events, criteria, None))
    for user in (ALICE, BOB, CAROL):
        assert ids(filter_events(events, criteria, user)) == expected

def test_date_range_is_inclusive_at_both_ends(events):
    criteria = FilterCriteria(date_range=DateRange(start=date(2024, 6, 1), end=date(2024, 6, 15)))
    assert ids(filter_events(events, criteria, None)) == ['1', '2']

def test_open_ended_date_ranges(events):
    assert ids(filter_events(events, FilterCriteria(date_range=DateRange(start=date(2024, 6, 2))), None)) == ['2', '3']
    assert ids(filter_events(events, FilterCriteria(date_range=DateRange(end=date(2024, 6, 1))), None)) == ['1']

def test_event_without_date_only_matches_unbounded_range(events):
    bounded = FilterCriteria(date_range=DateRange(start=date(2000, 1, 1)))
    assert '4' not in ids(filter_events(events, bounded, None))
    assert '4' in ids(filter_events(events, FilterCriteria(), None))

def test_all_criteria_combine(events):
    criteria = FilterCriteria(
        search_term='party',
        category='social',
        relation='attending',
        date_range=DateRange(start=date(2024, 6, 1), end=date(2024, 6, 30))
    )
    assert ids(filter_events(events, criteria, CAROL)) == ['2']
    assert filter_events(events, criteria, BOB) == []

def test_filter_is_idempotent_and_pure(events):
    criteria = FilterCriteria(search_term='p', relation='created')
    snapshot = list(events)
    once = filter_events(events, criteria, ALICE)
    assert filter_events(once, criteria, ALICE) == once
    assert events == snapshot

def test_single_event_scenarios():
    event = make_event('1', category='social', date=date(2024, 6, 1),
                       creator=UserSummary(id='u1'), attendees=[UserSummary(id='u2')])
    assert filter_events([event], FilterCriteria(category='social'), None) == [event]
    assert filter_events([event], FilterCriteria(relation='attending'), UserSummary(id='u2')) == [event]
    assert filter_events([event], FilterCriteria(relation='attending'), UserSummary(id='u3')) == []

def test_criteria_reject_unknown_values():
    with pytest.raises(ValueError):
        FilterCriteria(category='party')
    with pytest.raises(ValueError):
        FilterCriteria(relation='invited')

def test_criteria_from_raw_arguments():
    criteria = FilterCriteria.from_args(search='  meetup ', category='', relation=None,
                                        start='2024-06-01', end='')
    assert criteria.search_term == 'meetup'
    assert criteria.category == 'all'
    assert criteria.relation == 'all'
    assert criteria.date_range == DateRange(start=date(2024, 6, 1), end=None)
    assert criteria.is_active
    assert FilterCriteria.from_args().is_active is False

def test_criteria_from_raw_arguments_rejects_bad_dates():
    with pytest.raises(ValueError):
        FilterCriteria.from_args(start='next tuesday')

def test_describe_lists_active_filters():
    criteria = FilterCriteria(search_term='jazz', category='social', relation='created',
                              date_range=DateRange(start=date(2024, 6, 1), end=date(2024, 6, 30)))
    assert criteria.describe() == [
        'Search term: "jazz"',
        'Category: social',
        'Showing: Created by me',
        'From: 2024-06-01',
        'To: 2024-06-30',
    ]
