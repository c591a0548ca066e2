# =============================================================================
# app/protos.py - Generated Protocol Modules
# =============================================================================
# Builds the message and service modules for app/plugin.proto at import time
# with grpc.protos_and_services (backed by grpcio-tools), so no generated
# *_pb2.py files are checked in.
#
# Usage:
#   from app.protos import plugin_pb2, plugin_pb2_grpc
#   request = plugin_pb2.DiscoverRequest(settings=plugin_pb2.Settings(fileGlob="/data/*.csv"))
# =============================================================================

import grpc

# Resolved against sys.path, so it is relative to the project root
PROTO_PATH = "app/plugin.proto"

plugin_pb2, plugin_pb2_grpc = grpc.protos_and_services(PROTO_PATH)

SERVICE_NAME = "plugin.Plugin"

__all__ = [
    "PROTO_PATH",
    "SERVICE_NAME",
    "plugin_pb2",
    "plugin_pb2_grpc",
]
