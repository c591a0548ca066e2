#!/usr/bin/env python3
# =============================================================================
# scripts/plugin_client.py - Development Host
# =============================================================================
# Plays the host's role against a real plugin process:
#   1. Launches `python -m app.main` and reads the port handshake
#   2. Calls Discover with a file glob and prints the schemas
#   3. Calls Publish for each schema and prints the first records
#   4. Sends SIGINT and checks the plugin exits with code 0
#
# Usage:
#   poetry run python scripts/plugin_client.py "/data/*/*.csv"
#   poetry run python scripts/plugin_client.py "/data/**/*.csv" --limit 5
# =============================================================================

import argparse
import os
import signal
import subprocess
import sys

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

import grpc

from app.protos import plugin_pb2, plugin_pb2_grpc

HANDSHAKE_TIMEOUT_SECONDS = 10


def start_plugin() -> tuple[subprocess.Popen, int]:
    """Launch the plugin and wait for its port announcement."""
    process = subprocess.Popen(
        [sys.executable, "-m", "app.main"],
        cwd=PROJECT_ROOT,
        stdout=subprocess.PIPE,
        text=True,
    )
    line = process.stdout.readline()
    if not line.strip().isdigit():
        process.kill()
        raise RuntimeError(f"Unexpected handshake from plugin: {line!r}")
    return process, int(line.strip())


def main():
    parser = argparse.ArgumentParser(description="Exercise the CSV plugin like a host would")
    parser.add_argument("file_glob", help="Glob of CSV files, e.g. /data/*/*.csv")
    parser.add_argument("--limit", type=int, default=3, help="Records to print per schema")
    args = parser.parse_args()

    process, port = start_plugin()
    print("=" * 60)
    print(f"Plugin started on port {port} (pid {process.pid})")
    print("=" * 60)

    settings = plugin_pb2.Settings(fileGlob=args.file_glob)

    try:
        with grpc.insecure_channel(f"127.0.0.1:{port}") as channel:
            grpc.channel_ready_future(channel).result(timeout=HANDSHAKE_TIMEOUT_SECONDS)
            stub = plugin_pb2_grpc.PluginStub(channel)

            response = stub.Discover(plugin_pb2.DiscoverRequest(settings=settings))
            print(f"\nDiscovered {len(response.schemas)} schemas")

            for schema in response.schemas:
                print()
                print(f"Schema: {schema.name}")
                for prop in schema.properties:
                    print(f"  - {prop.name}: {prop.type or '(unknown)'}")

                stream = stub.Publish(plugin_pb2.PublishRequest(settings=settings, schema=schema))
                total = invalid = 0
                for record in stream:
                    total += 1
                    invalid += int(record.invalid)
                    if total <= args.limit:
                        marker = f"  INVALID ({record.error})" if record.invalid else ""
                        print(f"  {record.data}{marker}")
                print(f"  {total} records, {invalid} invalid")
    finally:
        process.send_signal(signal.SIGINT)
        code = process.wait(timeout=HANDSHAKE_TIMEOUT_SECONDS)
        print(f"\nPlugin exited with code {code}")


if __name__ == "__main__":
    main()
