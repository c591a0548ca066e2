# =============================================================================
# core/services/publish_service.py - Record Publishing
# =============================================================================
# Wires the engine together for the Publish operation:
#
#   schema.settings -> member files -> validated records (streamed)
#
# The file list is recovered from the schema itself, so Publish works in a
# fresh process without any state left over from Discover.
# =============================================================================

import logging
import time
from typing import Callable, Iterator

from app.exceptions import NoReadableFilesError, ProtocolError
from core.models.schema import Record, Schema
from lib.record_streamer import PublishError, PublishStats, stream_records
from lib.schema_settings import SchemaSettingsError, decode_settings

logger = logging.getLogger(__name__)


class PublishService:
    """
    Service for the Publish operation.

    Stateless: concurrent calls for different schemas touch disjoint files
    and share nothing.
    """

    @staticmethod
    def resolve_files(schema: Schema) -> list[str]:
        """
        Recover a schema's member files from its settings.

        Raises:
            ProtocolError: If the settings were not produced by Discover
        """
        try:
            return decode_settings(schema.settings)
        except SchemaSettingsError as e:
            raise ProtocolError(e.reason, suggestion=e.suggestion) from e

    @staticmethod
    def publish(
        schema: Schema,
        is_cancelled: Callable[[], bool] = lambda: False,
        stats: PublishStats | None = None,
    ) -> Iterator[Record]:
        """
        Stream every record of a schema.

        Settings are decoded before the first record is requested, so a
        malformed schema fails the call up front.

        Args:
            schema: A schema previously returned by Discover
            is_cancelled: Polled between rows to stop early
            stats: Optional counters, filled in while streaming

        Returns:
            Iterator of records in file order, then row order

        Raises:
            ProtocolError: If the schema settings cannot be decoded
            NoReadableFilesError: (while iterating) if no file could be read
        """
        files = PublishService.resolve_files(schema)
        logger.info(f"Publishing schema '{schema.name}' from {len(files)} files")
        return PublishService._stream(schema, files, is_cancelled, stats or PublishStats())

    @staticmethod
    def _stream(
        schema: Schema,
        files: list[str],
        is_cancelled: Callable[[], bool],
        stats: PublishStats,
    ) -> Iterator[Record]:
        started = time.perf_counter()
        try:
            yield from stream_records(schema.properties, files, is_cancelled, stats)
        except PublishError as e:
            raise NoReadableFilesError(schema.name, e.files) from e
        finally:
            elapsed = time.perf_counter() - started
            logger.info(
                f"Published schema '{schema.name}': {stats.records} records "
                f"({stats.invalid_records} invalid), {stats.files_read} files read, "
                f"{stats.files_skipped} skipped{', cancelled' if stats.cancelled else ''} "
                f"in {elapsed:.2f}s"
            )
