# =============================================================================
# app/ - gRPC Plugin Application Package
# =============================================================================
# This package contains the process the host launches:
# - main.py: Entry point, port handshake, signal handling
# - config.py: Environment variable loading and settings
# - servicer.py: Discover/Publish RPC implementations
# - protos.py: Message and service modules built from plugin.proto
# - exceptions.py: Call-level errors mapped to gRPC status codes
#
# The app layer is thin - it handles RPC concerns and delegates
# business logic to the core/ package.
# =============================================================================
