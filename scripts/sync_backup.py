"""
Push the live documents to the remote backup, or pull the remote backup
into the live documents, without starting the server.
"""

from __future__ import annotations

import argparse
import logging

from parkmaster.config import get_settings
from parkmaster.dependencies import build_backup_mirror, build_document_store
from parkmaster.sync import SnapshotSynchronizer

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Park Master backup sync")
    parser.add_argument(
        "direction",
        choices=["push", "pull"],
        help="push: local -> remote, pull: remote -> local",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    settings = get_settings()
    mirror = build_backup_mirror(settings)
    if not mirror.enabled:
        logger.error("Remote storage is not configured; nothing to do")
        return 1
    sync = SnapshotSynchronizer(build_document_store(settings), mirror)

    if args.direction == "push":
        result = sync.save(sync.collect())
        if not result.remote_ok:
            logger.error("Remote upload failed (%s)", result.remote_reason)
            return 1
        logger.info("Uploaded snapshot to bucket %s", settings.storage_bucket)
        return 0

    if not sync.restore_on_startup():
        return 1
    logger.info("Live documents restored into %s", settings.data_dir)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
