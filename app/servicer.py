# =============================================================================
# app/servicer.py - gRPC Plugin Service
# =============================================================================
# Implements the two RPCs of plugin.Plugin on top of core/services:
#
#   Discover(DiscoverRequest)  -> DiscoverResponse        (unary)
#   Publish(PublishRequest)    -> stream PublishRecord    (server streaming)
#
# The servicer is thin: it converts protobuf messages to models, calls the
# service, converts the results back, and maps exceptions to gRPC statuses.
# =============================================================================

import logging
import threading
from typing import Iterator

import grpc

from app.exceptions import (
    PluginException,
    plugin_exception_handler,
    unexpected_exception_handler,
)
from app.protos import plugin_pb2, plugin_pb2_grpc
from core.models.schema import DiscoverySettings, Property, PropertyType, Record, Schema
from core.services import DiscoveryService, PublishService

logger = logging.getLogger(__name__)


# =============================================================================
# Message Conversion
# =============================================================================

def settings_from_proto(message) -> DiscoverySettings:
    """Settings message -> DiscoverySettings."""
    return DiscoverySettings(file_glob=message.fileGlob)


def schema_to_proto(schema: Schema):
    """Schema model -> Schema message (unknown types are left unset)."""
    return plugin_pb2.Schema(
        name=schema.name,
        settings=schema.settings,
        properties=[
            plugin_pb2.Property(name=prop.name, type=prop.type.to_wire())
            for prop in schema.properties
        ],
    )


def schema_from_proto(message) -> Schema:
    """Schema message as sent back by the host -> Schema model."""
    return Schema(
        name=message.name,
        settings=message.settings,
        properties=tuple(
            Property(name=prop.name, type=PropertyType.from_wire(prop.type))
            for prop in message.properties
        ),
    )


def record_to_proto(record: Record):
    """Record model -> PublishRecord message with JSON-encoded data."""
    return plugin_pb2.PublishRecord(
        invalid=record.invalid,
        error=record.error,
        data=record.data_json(),
    )


# =============================================================================
# Servicer
# =============================================================================

class PluginServicer(plugin_pb2_grpc.PluginServicer):
    """
    gRPC servicer for the CSV plugin.

    Args:
        shutdown_event: Set by the process when it is shutting down; open
            Publish streams stop at the next row once it is set.
    """

    def __init__(self, shutdown_event: threading.Event | None = None):
        self._shutdown_event = shutdown_event or threading.Event()

    def Discover(self, request, context):
        """Find the schemas made available by the request's file glob."""
        try:
            discovery_settings = settings_from_proto(request.settings)
            logger.info(f"Discover: fileGlob={discovery_settings.file_glob!r}")
            schemas = DiscoveryService.discover(discovery_settings)
            return plugin_pb2.DiscoverResponse(
                schemas=[schema_to_proto(schema) for schema in schemas]
            )
        except PluginException as e:
            plugin_exception_handler(context, e)
        except Exception as e:
            unexpected_exception_handler(context, e)

    def Publish(self, request, context) -> Iterator:
        """Stream the records of the requested schema."""
        stream_closed = threading.Event()
        # Fires when the RPC ends for any reason, including client disconnect
        context.add_callback(stream_closed.set)

        def is_cancelled() -> bool:
            return (
                stream_closed.is_set()
                or self._shutdown_event.is_set()
                or not context.is_active()
            )

        try:
            schema = schema_from_proto(request.schema)
            logger.info(
                f"Publish: schema={schema.name!r}, "
                f"fileGlob={request.settings.fileGlob!r}"
            )
            for record in PublishService.publish(schema, is_cancelled):
                yield record_to_proto(record)
        except PluginException as e:
            plugin_exception_handler(context, e)
        except Exception as e:
            unexpected_exception_handler(context, e)


def add_plugin_servicer(server: grpc.Server, servicer: PluginServicer) -> None:
    """Register the servicer on a gRPC server."""
    plugin_pb2_grpc.add_PluginServicer_to_server(servicer, server)
