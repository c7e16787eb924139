"""Provisioning commands for the account key.

    python -m microblog.cli generate-keys
    python -m microblog.cli show-key
"""

import argparse
import asyncio
import sys

from microblog.core import database
from microblog.core.config import settings
from microblog.core.errors import KeyAlreadyExistsError
from microblog.core.activitypub.keys import KeyManager


async def cmd_generate_keys(args) -> int:
    await database.init_db()
    keys = KeyManager(database.get_session_factory())
    try:
        await keys.generate_and_store(args.owner)
    except KeyAlreadyExistsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Generated key pair for {args.owner}")
    print(await keys.get_public_key_pem(args.owner))
    return 0


async def cmd_show_key(args) -> int:
    await database.init_db()
    pem = await KeyManager(database.get_session_factory()).get_public_key_pem(args.owner)
    if pem is None:
        print(f"No key stored for {args.owner}", file=sys.stderr)
        return 1
    print(pem)
    return 0


async def _run(command, args) -> int:
    try:
        return await command(args)
    finally:
        # Pooled connections belong to this event loop
        await database.engine.dispose()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="microblog",
        description="Microblog ActivityPub provisioning",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    generate_parser = subparsers.add_parser("generate-keys", help="Generate and store the account key pair")
    generate_parser.add_argument("--owner", default=settings.ACTIVITYPUB_USERNAME,
                                 help="Owner id (default: configured account)")

    show_parser = subparsers.add_parser("show-key", help="Print the account public key as PEM")
    show_parser.add_argument("--owner", default=settings.ACTIVITYPUB_USERNAME,
                             help="Owner id (default: configured account)")

    args = parser.parse_args(argv)

    if args.command == "generate-keys":
        return asyncio.run(_run(cmd_generate_keys, args))
    elif args.command == "show-key":
        return asyncio.run(_run(cmd_show_key, args))
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
