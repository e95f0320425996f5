# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the analytics CLI.
"""

import json
from typing import Annotated

import typer

from dramaverse.cli.shared import C
from dramaverse.utils.config import get_settings


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()
    analytics = settings.analytics
    storage = settings.storage

    if json_output:
        config = {
            "analytics": {
                "events_url": analytics.events_url,
                "batch_size": analytics.batch_size,
                "flush_interval_seconds": analytics.flush_interval_seconds,
                "send_timeout_seconds": analytics.send_timeout_seconds,
                "teardown_timeout_seconds": analytics.teardown_timeout_seconds,
                "app_version": analytics.app_version,
                "auth_token": analytics.auth_token,
            },
            "storage": {
                "impl": storage.impl,
                "queue_key": storage.queue_storage_key,
                "device_id_key": storage.device_id_storage_key,
                "data_dir": str(storage.data_dir_path),
            },
            "valkey": {
                "host": settings.valkey.host,
                "port": settings.valkey.port,
                "db": settings.valkey.db,
                "ssl_enabled": settings.valkey.ssl,
                "password": settings.valkey.password,
            },
            "device": settings.device.model_dump(),
            "log_level": settings.log_level,
        }
        print(json.dumps(config, indent=2))
        return

    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    print(f"{C.CYAN}Delivery{C.RESET}")
    print(f"  Endpoint:   {C.WHITE}{analytics.events_url}{C.RESET}")
    print(f"  Batch:      {C.WHITE}{analytics.batch_size} events{C.RESET}")
    print(f"  Interval:   {C.WHITE}{analytics.flush_interval_seconds:g}s{C.RESET}")
    print(f"  Timeout:    {C.WHITE}{analytics.send_timeout_seconds:g}s{C.RESET}")
    auth = "bearer token" if analytics.auth_token else "none"
    print(f"  Auth:       {C.WHITE}{auth}{C.RESET}")
    print()

    print(f"{C.CYAN}Storage{C.RESET}")
    print(f"  Backend:    {C.WHITE}{storage.impl}{C.RESET}")
    print(f"  Queue key:  {C.WHITE}{storage.queue_storage_key}{C.RESET}")
    if storage.impl == "file":
        print(f"  Directory:  {C.WHITE}{storage.data_dir_path}{C.RESET}")
    else:
        print(f"  Valkey:     {C.WHITE}{settings.valkey.host}:{settings.valkey.port}{C.RESET}")
    print()
