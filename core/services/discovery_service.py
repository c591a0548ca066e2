# =============================================================================
# core/services/discovery_service.py - Schema Discovery
# =============================================================================
# Wires the engine together for the Discover operation:
#
#   glob -> candidate files -> headers -> schema groups -> inferred types
#
# Files that cannot be read are logged and left out; Discover itself only
# fails on programming errors. A glob with no matches returns no schemas.
# =============================================================================

import logging
import time
from concurrent.futures import ThreadPoolExecutor

from app.config import settings
from core.models.schema import CandidateFile, DiscoverySettings, Property, PropertyType, Schema
from lib.clusterer import SchemaGroup, cluster_files
from lib.csv_reader import FileError, read_header
from lib.locator import DiscoveryError, DiscoveryErrorKind, locate_files
from lib.schema_settings import encode_settings
from lib.type_inference import infer_types

logger = logging.getLogger(__name__)


def _read_candidate(path: str) -> CandidateFile | None:
    """Read one file's header; None (with a warning) if the file is unusable."""
    try:
        header = read_header(path)
    except FileError as e:
        logger.warning(f"Excluding {path}: {e.message}")
        return None
    return CandidateFile(path=path, header=tuple(header))


class DiscoveryService:
    """
    Service for the Discover operation.

    Stateless: every call re-reads the filesystem, so concurrent calls
    share nothing.
    """

    @staticmethod
    def read_candidates(files: list[str], max_open_files: int | None = None) -> list[CandidateFile]:
        """
        Read the headers of `files`, at most `max_open_files` at a time.

        Result order follows `files`; unreadable and empty files are dropped.
        """
        if not files:
            return []

        workers = min(max_open_files or settings.MAX_OPEN_FILES, len(files))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="header-reader") as pool:
            results = list(pool.map(_read_candidate, files))

        return [candidate for candidate in results if candidate is not None]

    @staticmethod
    def build_schema(
        group: SchemaGroup,
        infer: bool = True,
        sample_size: int | None = None,
    ) -> Schema:
        """
        Turn a clustered group into a Schema, inferring types if asked to.
        """
        if infer:
            types = infer_types(
                group.header,
                group.files,
                sample_size=sample_size or settings.INFERENCE_SAMPLE_SIZE,
            )
        else:
            types = [PropertyType.UNKNOWN] * len(group.header)

        return Schema(
            name=group.name,
            settings=encode_settings(group.files),
            properties=tuple(
                Property(name=name, type=prop_type)
                for name, prop_type in zip(group.header, types)
            ),
        )

    @staticmethod
    def discover(
        discovery_settings: DiscoverySettings,
        infer: bool | None = None,
        sample_size: int | None = None,
        max_open_files: int | None = None,
        require_matches: bool | None = None,
    ) -> list[Schema]:
        """
        Find all schemas made available by the settings' file glob.

        Args:
            discovery_settings: Request settings with the file glob
            infer: Infer property types (default: settings.INFER_TYPES)
            sample_size: Rows sampled per schema (default: settings.INFERENCE_SAMPLE_SIZE)
            max_open_files: Concurrent header reads (default: settings.MAX_OPEN_FILES)
            require_matches: Treat an empty glob as a discovery error
                (default: settings.REQUIRE_MATCHES)

        Returns:
            One Schema per distinct header, in a stable order
        """
        started = time.perf_counter()
        pattern = discovery_settings.file_glob
        infer = settings.INFER_TYPES if infer is None else infer
        require_matches = settings.REQUIRE_MATCHES if require_matches is None else require_matches

        try:
            files = locate_files(pattern, require_matches=require_matches)
        except DiscoveryError as e:
            logger.error(str(e))
            return []

        if not files:
            return []

        candidates = DiscoveryService.read_candidates(files, max_open_files)
        if not candidates:
            logger.warning(str(DiscoveryError(DiscoveryErrorKind.NO_READABLE_HEADERS, pattern)))
            return []

        groups = cluster_files(candidates)
        schemas = [
            DiscoveryService.build_schema(group, infer=infer, sample_size=sample_size)
            for group in groups
        ]

        elapsed = time.perf_counter() - started
        logger.info(
            f"Discovered {len(schemas)} schemas from {len(candidates)}/{len(files)} "
            f"readable files in {elapsed:.2f}s"
        )
        return schemas
