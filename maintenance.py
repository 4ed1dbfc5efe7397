import argparse
import logging
import sys

import config
import database
from database import execute, init_db
from errors import AppError
from repositories import posts, users

log = logging.getLogger(__name__)

POST_COLUMNS = ['id', 'user_id', 'user_name', 'user_email', 'active', 'created_at', 'content']
USER_COLUMNS = ['id', 'name', 'email', 'is_admin', 'created_at']


def print_table(rows, columns, out=None):
    out = out or sys.stdout
    if not rows:
        print('(no rows)', file=out)
        return
    widths = {c: max(len(c), *(len(str(r.get(c, ''))) for r in rows)) for c in columns}
    print('  '.join(c.ljust(widths[c]) for c in columns), file=out)
    for row in rows:
        print('  '.join(str(row.get(c, '')).ljust(widths[c]) for c in columns), file=out)


def list_users():
    return execute('SELECT id, name, email, is_admin, created_at FROM users ORDER BY created_at DESC')


def cmd_init_db(args):
    init_db()


def cmd_list_posts(args):
    print_table(posts.list_all(include_inactive=not args.active_only), POST_COLUMNS)


def cmd_purge(args):
    if args.id is not None:
        post_id = args.id
    else:
        matches = posts.search(args.match)
        print_table(matches, POST_COLUMNS)
        if not matches:
            log.info('No post matches %r', args.match)
            print_table(list_users(), USER_COLUMNS)
            return 1
        # Most recent match first
        post_id = matches[0]['id']
    result = posts.purge(post_id)
    log.info('Purged post %s (%s comments, %s likes)', result['post_id'], result['comments'], result['likes'])
    return 0


def cmd_set_admin(args):
    user = users.set_admin(args.email, is_admin=args.command == 'grant-admin')
    log.info('%s is_admin=%s', user['email'], user['is_admin'])


def build_parser():
    parser = argparse.ArgumentParser(description='Maintenance tasks for the social feed database')
    parser.add_argument('--db', default=None, help='SQLite database file (default: %s)' % config.DB_NAME)
    subparsers = parser.add_subparsers(dest='command', required=True)

    p = subparsers.add_parser('init-db', help='create the tables')
    p.set_defaults(func=cmd_init_db)

    p = subparsers.add_parser('list-posts', help='list posts, including inactive ones')
    p.add_argument('--active-only', action='store_true')
    p.set_defaults(func=cmd_list_posts)

    p = subparsers.add_parser('purge', help='delete a post with its comments and likes')
    target = p.add_mutually_exclusive_group(required=True)
    target.add_argument('--id', type=int)
    target.add_argument('--match', help='delete the most recent post containing this text')
    p.set_defaults(func=cmd_purge)

    for name in ('grant-admin', 'revoke-admin'):
        p = subparsers.add_parser(name)
        p.add_argument('email')
        p.set_defaults(func=cmd_set_admin)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    if args.db:
        database.DB_NAME = args.db
    try:
        return args.func(args) or 0
    except AppError as e:
        log.error('%s%s', e.message, f' ({e.detail})' if e.detail else '')
        return 1


if __name__ == '__main__':
    sys.exit(main())
