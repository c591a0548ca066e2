# =============================================================================
# lib/ - Standalone Engine Modules
# =============================================================================
# This package contains the discovery and publish engine:
# - locator.py: Glob expansion into candidate CSV files
# - csv_reader.py: Header parsing and row streaming
# - clusterer.py: Grouping files into schemas by header
# - schema_settings.py: Opaque, versioned schema settings codec
# - type_inference.py: Ordered type checkers, inference and coercion
# - record_streamer.py: Row validation and record streaming
# - utils.py: Shared utilities (base error class, path normalization)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.clusterer import SchemaGroup, cluster_files
from lib.csv_reader import CsvRow, FileError, FileErrorKind, iter_rows, read_header
from lib.locator import DiscoveryError, DiscoveryErrorKind, locate_files
from lib.record_streamer import PublishError, PublishStats, build_record, stream_records
from lib.schema_settings import SchemaSettingsError, decode_settings, encode_settings
from lib.type_inference import CoercionError, infer_column_type, infer_types
from lib.utils import EngineError, normalize_path

__all__ = [
    # Locator
    "DiscoveryError",
    "DiscoveryErrorKind",
    "locate_files",
    # CSV reading
    "FileError",
    "CsvRow",
    "FileErrorKind",
    "iter_rows",
    "read_header",
    # Clustering
    "SchemaGroup",
    "cluster_files",
    # Settings
    "SchemaSettingsError",
    "decode_settings",
    "encode_settings",
    # Inference
    "CoercionError",
    "infer_column_type",
    "infer_types",
    # Streaming
    "PublishError",
    "PublishStats",
    "build_record",
    "stream_records",
    # Utils
    "EngineError",
    "normalize_path",
]
