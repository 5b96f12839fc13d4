"""
Command-line interface for the EventHub API.

The credential is kept in a local file (see EVENTHUB_CREDENTIAL_FILE), so a
login persists across invocations until `eventhub logout` or until the API
stops accepting it.

Common use cases:
    # Log in (prompts for the password)
    eventhub login alice@example.com

    # List your events, narrowed like the dashboard
    eventhub list --search meetup --category social --relation attending

    # Browse public events without logging in
    eventhub list --public --start 2024-06-01 --end 2024-06-30

    # Create an event with an image
    eventhub create --title "Python Night" --description "Talks and pizza" \\
        --date 2024-06-01 --time 18:00 --location "Room 1" --category social \\
        --max-attendees 40 --image poster.png
"""

import argparse
import asyncio
import getpass
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, Optional

from .api.client import EventAPIClient
from .auth import FileCredentialStore, SessionManager
from .config import Config
from .errors import EventHubError, ValidationError
from .models.event import CATEGORIES, EventDraft
from .utils.event_filter import FilterCriteria, RELATIONS, filter_events
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

# Commands that work without a session
ANONYMOUS_COMMANDS = {'login', 'register', 'logout', 'whoami'}

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='eventhub',
        description='EventHub command-line client',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  # Log in and check who you are
  eventhub login alice@example.com
  eventhub whoami

  # Events you created in June
  eventhub list --relation created --start 2024-06-01 --end 2024-06-30

  # View a specific event
  eventhub show 665f1c2e9b1d4a0012345678

  # RSVP and comment
  eventhub attend 665f1c2e9b1d4a0012345678
  eventhub comment 665f1c2e9b1d4a0012345678 "See you there"
        """
    )
    parser.add_argument('--api-url', help=f'API base URL (default: {Config.API_BASE_URL})')
    parser.add_argument('--credential-file', help=f'Where the login is stored (default: {Config.CREDENTIAL_FILE})')
    parser.add_argument('--debug', action='store_true', help='Show debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    login_parser = subparsers.add_parser('login', help='Log in and store the credential')
    login_parser.add_argument('email')
    login_parser.add_argument('--password', help='Password (prompted for when omitted)')

    register_parser = subparsers.add_parser('register', help='Create an account and log in')
    register_parser.add_argument('email')
    register_parser.add_argument('--name', required=True, help='Display name')
    register_parser.add_argument('--password', help='Password (prompted for when omitted)')

    subparsers.add_parser('logout', help='Forget the stored credential')
    subparsers.add_parser('whoami', help='Show the logged in user')

    list_parser = subparsers.add_parser('list', help='List events')
    list_parser.add_argument('--public', action='store_true', help='List public events (no login needed)')
    list_parser.add_argument('--search', help='Text to look for in title or description')
    list_parser.add_argument('--category', choices=['all', *CATEGORIES], help='Only this category')
    list_parser.add_argument('--relation', choices=list(RELATIONS), help='Only events you created or attend')
    list_parser.add_argument('--start', help='Earliest date (YYYY-MM-DD, inclusive)')
    list_parser.add_argument('--end', help='Latest date (YYYY-MM-DD, inclusive)')
    list_parser.add_argument('--detailed', action='store_true', help='Show all event information')

    show_parser = subparsers.add_parser('show', help='Show a specific event')
    show_parser.add_argument('event_id')

    for name, help_text in (('create', 'Create an event'), ('edit', 'Edit an event you created')):
        event_parser = subparsers.add_parser(name, help=help_text)
        if name == 'edit':
            event_parser.add_argument('event_id')
        event_parser.add_argument('--title')
        event_parser.add_argument('--description')
        event_parser.add_argument('--date', help='YYYY-MM-DD')
        event_parser.add_argument('--time', help='HH:MM')
        event_parser.add_argument('--location')
        event_parser.add_argument('--category', choices=CATEGORIES)
        event_parser.add_argument('--max-attendees', type=int)
        event_parser.add_argument('--image', type=Path, help='Image file to upload')

    delete_parser = subparsers.add_parser('delete', help='Delete an event you created')
    delete_parser.add_argument('event_id')

    attend_parser = subparsers.add_parser('attend', help='Attend an event')
    attend_parser.add_argument('event_id')

    comment_parser = subparsers.add_parser('comment', help='Comment on an event')
    comment_parser.add_argument('event_id')
    comment_parser.add_argument('content')

    upload_parser = subparsers.add_parser('upload', help='Upload an image and print its URL')
    upload_parser.add_argument('path', type=Path)

    return parser

def apply_event_args(draft: EventDraft, args: argparse.Namespace) -> EventDraft:
    """Overwrite draft fields with the options given on the command line."""
    for field_name in ('title', 'description', 'date', 'time', 'location', 'category', 'max_attendees'):
        value = getattr(args, field_name, None)
        if value is not None:
            setattr(draft, field_name, value)
    return draft

async def upload_file(client: EventAPIClient, path: Path) -> str:
    content_type, _ = mimetypes.guess_type(path.name)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ValidationError({'image': f"cannot read {path}: {e.strerror}"}) from e
    return await client.upload_image(path.name, data, content_type or 'application/octet-stream')

def print_events(events, total: int, criteria: FilterCriteria, detailed: bool = False):
    logger.info(f"Showing {len(events)} of {total} events")
    if criteria.is_active:
        logger.info("Active filters: " + '; '.join(criteria.describe()))
    for event in events:
        logger.info(event.to_detailed_string() if detailed else event.to_summary_string())
        if detailed:
            logger.info('-' * 50)

async def run_command(args: argparse.Namespace, manager: SessionManager) -> int:
    """
    Execute a parsed command.

    Returns:
        int: Process exit status
    """
    client = manager.client

    if args.command not in ANONYMOUS_COMMANDS and not (args.command == 'list' and args.public):
        if not manager.session.is_authenticated:
            logger.error("Not logged in. Run 'eventhub login <email>' first.")
            return 1

    if args.command == 'login':
        password = args.password or getpass.getpass('Password: ')
        session = await manager.login(args.email, password)
        logger.info(f"Logged in as {session.user.name or session.user.email}")

    elif args.command == 'register':
        password = args.password or getpass.getpass('Password: ')
        session = await manager.register({'name': args.name, 'email': args.email, 'password': password})
        logger.info(f"Registered and logged in as {session.user.name or session.user.email}")

    elif args.command == 'logout':
        manager.logout()
        logger.info("Logged out")

    elif args.command == 'whoami':
        user = manager.current_user
        if user is None:
            logger.info("Not logged in")
            return 1
        logger.info(f"{user.name} <{user.email}> (id {user.id})")

    elif args.command == 'list':
        try:
            criteria = FilterCriteria.from_args(
                search=args.search,
                category=args.category,
                relation=args.relation,
                start=args.start,
                end=args.end
            )
        except ValueError as e:
            logger.error(f"Invalid filter: {e}")
            return 2
        events = await (client.get_public_events() if args.public else client.get_events())
        filtered = filter_events(events, criteria, manager.current_user)
        print_events(filtered, len(events), criteria, detailed=args.detailed)

    elif args.command == 'show':
        event = await client.get_event(args.event_id)
        logger.info(event.to_detailed_string())

    elif args.command == 'create':
        draft = apply_event_args(EventDraft(), args)
        draft.validate()
        if args.image:
            draft.image_url = await upload_file(client, args.image)
        event = await client.create_event(draft)
        logger.info(f"Created event {event.id}")
        logger.info(event.to_summary_string())

    elif args.command == 'edit':
        event = await client.get_event(args.event_id)
        if not event.is_created_by(manager.current_user):
            logger.error("Only the creator can edit this event")
            return 1
        draft = apply_event_args(EventDraft.from_event(event), args)
        draft.validate()
        if args.image:
            draft.image_url = await upload_file(client, args.image)
        event = await client.update_event(args.event_id, draft)
        logger.info(f"Updated event {event.id}")
        logger.info(event.to_summary_string())

    elif args.command == 'delete':
        await client.delete_event(args.event_id)
        logger.info(f"Deleted event {args.event_id}")

    elif args.command == 'attend':
        await client.attend_event(args.event_id)
        event = await client.get_event(args.event_id)
        logger.info(f"Attending {event.title} ({event.attendee_count}/{event.max_attendees})")

    elif args.command == 'comment':
        await client.add_comment(args.event_id, args.content)
        logger.info("Comment posted")

    elif args.command == 'upload':
        url = await upload_file(client, args.path)
        logger.info(url)

    return 0

async def run(args: argparse.Namespace, manager: SessionManager) -> int:
    """Restore the stored session, run the command and clean up."""
    try:
        await manager.restore_session()
        return await run_command(args, manager)
    except EventHubError as e:
        logger.error(f"Error: {e}")
        return 1
    finally:
        manager.close()

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command-line tool"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, fmt='%(message)s')

    if not args.command:
        parser.print_help()
        return 0

    client = EventAPIClient(args.api_url or Config.API_BASE_URL, timeout=Config.API_TIMEOUT)
    manager = SessionManager(client, FileCredentialStore(args.credential_file or Config.CREDENTIAL_FILE))
    try:
        return asyncio.run(run(args, manager))
    except KeyboardInterrupt:
        logger.info("Cancelled")
        return 130

if __name__ == "__main__":
    sys.exit(main())
