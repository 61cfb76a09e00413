import argparse
import logging
from typing import Optional, Sequence

from bubbletrack.app import create_store
from bubbletrack.models.image import image_from_file
from bubbletrack.state.store import ActivityStore
from bubbletrack.utils.config import Settings
from bubbletrack.utils.constants import CATEGORIES
from bubbletrack.utils.env import load_env
from bubbletrack.utils.helper import now_ms
from bubbletrack.utils.logs import setup_logging
from bubbletrack.utils.timefmt import elapsed_label

logger = logging.getLogger(__name__)

CATEGORY_SLUGS = [slug for slug, _ in CATEGORIES]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='bubbletrack', description='Track how long since you last did things.'
    )
    parser.add_argument('-c', '--category', default=CATEGORY_SLUGS[0])
    parser.add_argument('-v', '--verbose', action='store_true')
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('list', help='List activities in the category')

    add = sub.add_parser('add', help='Add an activity')
    add.add_argument('title')

    rename = sub.add_parser('rename', help='Rename an activity')
    rename.add_argument('id')
    rename.add_argument('title')

    delete = sub.add_parser('delete', help='Delete an activity')
    delete.add_argument('id')

    reset = sub.add_parser('reset', help='Mark an activity as done just now')
    reset.add_argument('id')

    image = sub.add_parser('image', help='Set or clear an activity image')
    image.add_argument('id')
    group = image.add_mutually_exclusive_group(required=True)
    group.add_argument('--url')
    group.add_argument('--file')
    group.add_argument('--clear', action='store_true')

    return parser


def _resolve_id(store: ActivityStore, category: str, prefix: str) -> Optional[str]:
    '''Accept a full id or an unambiguous prefix within the category.'''
    prefix = prefix.strip()
    if not prefix:
        return None
    matches = [a.id for a in store.list_by_category(category) if a.id.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    return None


def run(args: argparse.Namespace, store: ActivityStore) -> int:
    category = args.category

    if args.command == 'list':
        now = now_ms()
        activities = store.list_by_category(category)
        if not activities:
            print(f'No activities in {category}.')
        for a in activities:
            print(f'{a.id[:8]}  {a.title:<30}  {elapsed_label(a.last_reset_at, now)}')
        return 0

    if args.command == 'add':
        new_id = store.add(category, args.title)
        if new_id is None:
            print('Title cannot be empty.')
            return 1
        print(new_id)
        return 0

    activity_id = _resolve_id(store, category, args.id)
    if activity_id is None:
        print(f'No single activity in {category} matches {args.id!r}.')
        return 1

    if args.command == 'rename':
        store.rename(activity_id, args.title)
    elif args.command == 'delete':
        store.delete(activity_id)
    elif args.command == 'reset':
        store.reset_timer(activity_id)
    elif args.command == 'image':
        if args.clear:
            store.set_image(activity_id, None)
        elif args.file:
            store.set_image(activity_id, image_from_file(args.file).uri)
        else:
            store.set_image(activity_id, args.url)
    return 0


def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    settings = settings or Settings.from_env()
    with create_store(settings) as store:
        return run(args, store)


def console() -> int:
    setup_logging(logging.WARNING)
    load_env()
    return main()
