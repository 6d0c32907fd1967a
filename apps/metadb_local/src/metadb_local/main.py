from __future__ import annotations

import argparse
import json
import logging
import sys
from uuid import UUID

from dotenv import load_dotenv
from metadb_core.errors import BlobRefNotFoundError, MetaDBError
from metadb_core.models import BlobRef, BlobStatus, Key
from metadb_core.ports import BlobRefStore, ObjectLocator
from metadb_core.services import parse_key
from pydantic import ValidationError

from metadb_local.adapters import LocalObjectLocator, SQLiteBlobRefStore
from metadb_local.config import Settings

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    "ready": BlobRef.ready,
    "mark-for-deletion": BlobRef.mark_for_deletion,
    "fail": BlobRef.fail,
}


def _size(value: str) -> int:
    size = int(value)
    if size < 0:
        raise argparse.ArgumentTypeError(f"size must not be negative: {size}")
    return size


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="metadb-local", description="Inspect and manage blob ref records.")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create a new blob ref in the initializing state.")
    create.add_argument("--size", type=_size, required=True)
    create.add_argument("--store", required=True)
    create.add_argument("--record", required=True)

    for name in ("show", *_TRANSITIONS, "purge"):
        command = commands.add_parser(name)
        command.add_argument("key")
    return parser


def _dump(blob: BlobRef, locator: ObjectLocator) -> str:
    payload = blob.model_dump(mode="json")
    payload["status"] = BlobStatus(blob.status).name
    payload["object_location"] = locator.locate(blob)
    return json.dumps(payload, ensure_ascii=True)


def _load(store: BlobRefStore, key: UUID) -> BlobRef:
    blob = store.get_blob_ref(key)
    if blob is None:
        raise BlobRefNotFoundError(key)
    return blob


def _run(args: argparse.Namespace, settings: Settings, store: BlobRefStore, locator: ObjectLocator) -> str:
    if args.command == "create":
        blob = BlobRef.create(args.size, args.store, args.record)
        store.create_blob_ref(blob)
        return _dump(blob, locator)

    key = parse_key(Key(kind=settings.entity_kind, name=args.key))
    blob = _load(store, key)

    if args.command == "show":
        return _dump(blob, locator)

    if args.command == "purge":
        if blob.status != BlobStatus.PENDING_DELETION:
            raise MetaDBError(f"Blob ref {key} is {BlobStatus(blob.status).name}, not PENDING_DELETION")
        store.delete_blob_ref(key)
        return json.dumps({"key": str(key), "purged": True}, ensure_ascii=True)

    _TRANSITIONS[args.command](blob)
    store.update_blob_ref(blob)
    return _dump(blob, locator)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    load_dotenv()
    try:
        settings = Settings()
    except ValidationError as exc:
        print(f"error: invalid settings: {exc}", file=sys.stderr)
        return 2
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings.ensure_dirs()

    store = SQLiteBlobRefStore(str(settings.sqlite_path), kind=settings.entity_kind)
    locator = LocalObjectLocator(str(settings.object_path))

    try:
        output = _run(args, settings, store, locator)
    except MetaDBError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(output, flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
