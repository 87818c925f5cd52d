#!/usr/bin/env python3
"""Member database and session maintenance for the join page."""
import argparse
import sys

from colorama import init, Fore, Style

from join_system.config import load_config
from join_system.logger import JoinError
from join_system.member_db import MemberDatabase
from join_system.session import SessionManager


def print_success(msg):
    print(f"{Fore.GREEN}✓ {msg}{Style.RESET_ALL}")


def print_error(msg):
    print(f"{Fore.RED}✗ {msg}{Style.RESET_ALL}", file=sys.stderr)


def print_info(msg):
    print(f"{Fore.BLUE}ℹ {msg}{Style.RESET_ALL}")


def init_db(config):
    members = MemberDatabase.from_config(config)
    members.initialize()
    print_success(f"Member database ready at {members.path}")


def add_member(config, email, name=None):
    members = MemberDatabase.from_config(config)
    if members.email_exists(email):
        print_error(f"Member {email} already exists")
        return False

    member_id = members.add_member(email, name=name)
    print_success(f"Added member {email} (id {member_id})")
    return True


def list_members(config):
    members = MemberDatabase.from_config(config).list_members()
    if not members:
        print_info("No members registered")
        return

    print("Members:")
    for member in members:
        name = member['name'] or '-'
        print(f"  {member['email']} (name: {name}, created: {member['created']})")


def cleanup_sessions(config):
    count = SessionManager.from_config(config).cleanup_expired_sessions()
    print_success(f"Cleaned up {count} expired sessions")


def main(argv=None):
    parser = argparse.ArgumentParser(description='Member database and session maintenance for the join page')
    parser.add_argument('--config', help='Path to join.yaml (default: $JOIN_CONFIG)')

    parser.add_argument('--init-db', action='store_true',
                        help='Create the members table')
    parser.add_argument('--add-member', action='store_true',
                        help='Register a member email')
    parser.add_argument('--list-members', action='store_true',
                        help='List registered members')
    parser.add_argument('--cleanup', action='store_true',
                        help='Remove expired session files')
    parser.add_argument('--email', help='Email for --add-member')
    parser.add_argument('--name', help='Name for --add-member')

    args = parser.parse_args(argv)

    if args.add_member and not args.email:
        parser.error("--email is required for --add-member")

    init()

    try:
        config = load_config(args.config)

        if args.init_db:
            init_db(config)
        elif args.add_member:
            if not add_member(config, args.email, args.name):
                return 1
        elif args.list_members:
            list_members(config)
        elif args.cleanup:
            cleanup_sessions(config)
        else:
            parser.print_help()
    except JoinError as e:
        print_error(str(e))
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
