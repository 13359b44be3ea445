#!/usr/bin/env python3
"""
Inspect and manage single objects in attachment storage.

Operates on raw storage keys, using the same settings as the application
(credentials file, directory, host, mock mode).

Usage:
    python scripts/storage_tool.py url avatars/1/original.png
    python scripts/storage_tool.py signed-url avatars/1/original.png --expires 600
    python scripts/storage_tool.py download avatars/1/original.png /tmp/original.png
    python scripts/storage_tool.py delete avatars/1/original.png

Requires:
    - .env file (or environment) with STORAGE_* settings
"""

import logging
import sys
from pathlib import Path
from typing import Optional

# Add src to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from src.config.settings import get_settings
from src.infrastructure.storage.softlayer import create_storage


class KeyAttachment:
    """Minimal attachment whose every style maps to one storage key."""

    default_style = "original"

    def __init__(self, key: str) -> None:
        self.key = key
        self.original_filename = Path(key).name

    def path(self, style: Optional[str] = None) -> str:
        return self.key

    def url(self, style: Optional[str] = None) -> str:
        return f"/{self.key}"

    def after_flush_writes(self) -> None:
        pass


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Manage objects in attachment storage')
    subparsers = parser.add_subparsers(dest='command', required=True)

    url_parser = subparsers.add_parser('url', help='Print the public URL for a key')
    url_parser.add_argument('key')

    signed_parser = subparsers.add_parser('signed-url', help='Print an expiring URL for a key')
    signed_parser.add_argument('key')
    signed_parser.add_argument('--expires', type=int, default=3600, help='Seconds until the URL expires')

    download_parser = subparsers.add_parser('download', help='Copy an object to a local file')
    download_parser.add_argument('key')
    download_parser.add_argument('dest')

    delete_parser = subparsers.add_parser('delete', help='Delete an object')
    delete_parser.add_argument('key')

    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level.upper(),
    )

    missing = settings.validate_required_fields()
    if missing:
        print(f"ERROR: missing settings: {', '.join(missing)}")
        sys.exit(1)

    storage = create_storage(KeyAttachment(args.key), settings)

    if args.command == 'url':
        print(storage.public_url())
    elif args.command == 'signed-url':
        print(storage.expiring_url(args.expires))
    elif args.command == 'download':
        if not storage.copy_to_local_file(None, args.dest):
            sys.exit(1)
        print(f"Saved {args.key} to {args.dest}")
    elif args.command == 'delete':
        storage.queue_delete(args.key)
        storage.flush_deletes()
        print(f"Deleted {args.key}")

    sys.exit(0)


if __name__ == '__main__':
    main()
