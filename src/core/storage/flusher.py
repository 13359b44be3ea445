"""
Flushing queued writes and deletes to a remote directory.

Uploads get exactly one recovery path: if the container is missing, it is
created and the upload is tried once more. Everything else propagates and
aborts the rest of the batch. Objects written or deleted before the failure
stay written or deleted.
"""

import logging
from enum import Enum
from typing import BinaryIO, Callable, Mapping, MutableMapping, MutableSequence, Optional

from .attachment import content_type_of, rewind
from .directory import Directory
from .errors import FatalTransportError, TransientNotFound

logger = logging.getLogger(__name__)


class UploadState(Enum):
    """
    States of a single upload.

    ATTEMPTING -> SUCCEEDED
    ATTEMPTING -> CREATED_CONTAINER -> ATTEMPTING -> SUCCEEDED | FAILED
    """
    ATTEMPTING = "attempting"
    CREATED_CONTAINER = "created_container"
    FAILED = "failed"
    SUCCEEDED = "succeeded"


def upload_with_retry(directory: Directory, fields: Mapping) -> UploadState:
    """
    Upload one object, creating the container once if it's missing.

    Returns SUCCEEDED or raises. A second TransientNotFound is re-raised
    as FatalTransportError.
    """
    body = fields.get("body")
    start = body.tell() if hasattr(body, "tell") else None
    state = UploadState.ATTEMPTING
    retried = False

    while True:
        try:
            directory.create_file(**fields)
            return UploadState.SUCCEEDED
        except TransientNotFound as e:
            if retried:
                state = UploadState.FAILED
                logger.error(
                    "Container still missing after create",
                    extra={"directory": directory.key, "key": fields.get("key"), "state": state.value}
                )
                raise FatalTransportError(
                    f"Container {directory.key} not found after creating it"
                ) from e

            logger.info(
                "Container missing, creating it",
                extra={"directory": directory.key}
            )
            directory.save()
            state = UploadState.CREATED_CONTAINER
            logger.info(
                "Retrying upload",
                extra={"directory": directory.key, "key": fields.get("key"), "state": state.value}
            )

            # The failed attempt may have consumed the stream
            if start is not None:
                body.seek(start)
            retried = True
            state = UploadState.ATTEMPTING


def flush_writes(
    directory: Directory,
    queued_for_write: MutableMapping[str, BinaryIO],
    path: Callable[[str], str],
    is_public: Callable[[str], bool],
    extra_fields: Optional[Mapping] = None,
    after_flush_writes: Optional[Callable[[], None]] = None,
) -> None:
    """Upload every queued (style, file) pair, then clear the queue."""
    for style, file in queued_for_write.items():
        key = path(style)
        logger.info("saving", extra={"key": key})

        fields = dict(extra_fields or {})
        fields.update(
            body=file,
            key=key,
            public=is_public(style),
            content_type=content_type_of(file),
        )

        try:
            upload_with_retry(directory, fields)
        finally:
            rewind(file)

    if after_flush_writes is not None:
        after_flush_writes()

    queued_for_write.clear()


def flush_deletes(directory: Directory, queued_for_delete: MutableSequence[str]) -> None:
    """Delete every queued key in order, then clear the queue. No retries."""
    for key in queued_for_delete:
        logger.info("deleting", extra={"key": key})
        directory.destroy(key)

    queued_for_delete.clear()
