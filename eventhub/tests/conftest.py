import itertools
import json

import httpx
import pytest

from eventhub.api.client import EventAPIClient
from eventhub.auth import MemoryCredentialStore, SessionManager
from eventhub.config import TestingConfig
from eventhub.web import create_app

class FakeEventAPI:
    """In-memory stand-in for the event-management API, served through httpx.MockTransport."""

    def __init__(self):
        self.users = {}
        self.passwords = {}
        self.tokens = {}
        self.events = {}
        self.requests = []
        self.offline = False
        self._ids = itertools.count(1)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def add_user(self, name, email, password='secret', user_id=None):
        user_id = user_id or f"u{next(self._ids)}"
        self.users[user_id] = {'_id': user_id, 'name': name, 'email': email}
        self.passwords[email] = (password, user_id)
        return self.users[user_id]

    def issue_token(self, user_id):
        token = f"token-{user_id}-{next(self._ids)}"
        self.tokens[token] = user_id
        return token

    def add_event(self, title, creator_id, **fields):
        event_id = fields.pop('_id', None) or f"e{next(self._ids)}"
        event = {
            '_id': event_id,
            'title': title,
            'description': fields.get('description', ''),
            'date': fields.get('date', '2024-06-01T00:00:00.000Z'),
            'time': fields.get('time', '18:00'),
            'location': fields.get('location', 'Main Hall'),
            'category': fields.get('category', 'social'),
            'maxAttendees': fields.get('maxAttendees', 10),
            'attendees': [self.users[user_id] for user_id in fields.get('attendees', [])],
            'creator': self.users[creator_id],
            'imageUrl': fields.get('imageUrl', ''),
            'comments': []
        }
        self.events[event_id] = event
        return event

    def paths(self, method=None):
        return [r.url.path for r in self.requests if method is None or r.method == method]

    # Request handling

    def _user_for(self, request):
        header = request.headers.get('Authorization', '')
        if not header.startswith('Bearer '):
            return None
        user_id = self.tokens.get(header[len('Bearer '):])
        return self.users.get(user_id)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError('API offline', request=request)

        method = request.method
        parts = [part for part in request.url.path.split('/') if part][1:]  # drop 'api'
        user = self._user_for(request)
        body = json.loads(request.content) if request.headers.get('content-type') == 'application/json' else {}

        def reply(status, data=None):
            return httpx.Response(status, json=data) if data is not None else httpx.Response(status)

        if parts == ['auth', 'login'] and method == 'POST':
            stored = self.passwords.get(body.get('email'))
            if not stored or stored[0] != body.get('password'):
                return reply(400, {'message': 'Invalid credentials'})
            user_id = stored[1]
            return reply(200, {'token': self.issue_token(user_id), 'user': self.users[user_id]})

        if parts == ['auth', 'register'] and method == 'POST':
            if body.get('email') in self.passwords:
                return reply(400, {'message': 'User already exists'})
            new_user = self.add_user(body['name'], body['email'], body['password'])
            return reply(201, {'token': self.issue_token(new_user['_id']), 'user': new_user})

        if parts[:2] == ['events', 'public'] and method == 'GET':
            if len(parts) == 2:
                return reply(200, list(self.events.values()))
            event = self.events.get(parts[2])
            return reply(200, event) if event else reply(404, {'message': 'Event not found'})

        if parts == ['upload'] and method == 'POST':
            if user is None:
                return reply(401, {'message': 'Not authorized'})
            if b'name="image"' not in request.content:
                return reply(400, {'message': 'No image'})
            return reply(200, {'url': f"https://cdn.test/uploads/{next(self._ids)}.png"})

        # Everything below requires a valid token
        if user is None:
            return reply(401, {'message': 'Not authorized, token failed'})

        if parts == ['auth', 'me'] and method == 'GET':
            return reply(200, user)

        if parts == ['events']:
            if method == 'GET':
                return reply(200, list(self.events.values()))
            if method == 'POST':
                fields = {key: value for key, value in body.items() if key != 'title'}
                event = self.add_event(body['title'], user['_id'], **fields)
                return reply(201, event)

        if len(parts) >= 2 and parts[0] == 'events':
            event = self.events.get(parts[1])
            if event is None:
                return reply(404, {'message': 'Event not found'})
            is_creator = event['creator']['_id'] == user['_id']

            if len(parts) == 2:
                if method == 'GET':
                    return reply(200, event)
                if not is_creator:
                    return reply(403, {'message': 'Not authorized to modify this event'})
                if method == 'PUT':
                    event.update({key: value for key, value in body.items() if key != '_id'})
                    return reply(200, event)
                if method == 'DELETE':
                    del self.events[parts[1]]
                    return reply(200, {'message': 'Event removed'})

            if parts[2:] == ['attend'] and method == 'POST':
                if any(a['_id'] == user['_id'] for a in event['attendees']):
                    return reply(400, {'message': 'Already attending'})
                if len(event['attendees']) >= event['maxAttendees']:
                    return reply(400, {'message': 'Event is full'})
                event['attendees'].append(user)
                return reply(200, event)

            if parts[2:] == ['comments'] and method == 'POST':
                event['comments'].append({
                    'content': body['content'],
                    'user': user,
                    'createdAt': '2024-05-20T10:00:00.000Z'
                })
                return reply(201, event['comments'])

        return reply(404, {'message': 'Route not found'})

@pytest.fixture
def fake_api():
    api = FakeEventAPI()
    api.add_user('Alice', 'alice@example.com', 'wonderland', user_id='u1')
    api.add_user('Bob', 'bob@example.com', 'builder', user_id='u2')
    api.add_event('Python Meetup', 'u1', _id='e1', description='Talks about asyncio',
                  category='conference', date='2024-06-01T00:00:00.000Z', attendees=['u2'])
    api.add_event('Board Game Night', 'u2', _id='e2', description='Bring snacks',
                  category='social', date='2024-06-15T00:00:00.000Z', maxAttendees=1)
    return api

@pytest.fixture
def api_client(fake_api):
    return EventAPIClient('http://api.test', timeout=5, transport=fake_api.transport)

@pytest.fixture
def store():
    return MemoryCredentialStore()

@pytest.fixture
def manager(api_client, store):
    return SessionManager(api_client, store)

@pytest.fixture
def app(fake_api):
    app = create_app(TestingConfig)
    app.config['API_TRANSPORT'] = fake_api.transport
    return app

@pytest.fixture
def client(app):
    return app.test_client()

@pytest.fixture
def logged_in_client(client):
    response = client.post('/login', data={'email': 'alice@example.com', 'password': 'wonderland'})
    assert response.status_code == 302
    return client
