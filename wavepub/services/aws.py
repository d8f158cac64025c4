"""Shared AWS helpers for service clients."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config

from wavepub.config.settings import StoreConfig


def create_boto3_client(
    service_name: str,
    store_config: StoreConfig,
    *,
    region_name: str | None = None,
) -> Any:
    """Instantiate a boto3 client using configured credentials if available."""

    client_kwargs: dict[str, Any] = {
        "region_name": region_name or store_config.region,
        "config": Config(retries={"max_attempts": 3, "mode": "standard"}),
    }
    if store_config.endpoint_url:
        client_kwargs["endpoint_url"] = store_config.endpoint_url
    if store_config.access_key and store_config.secret_key:
        client_kwargs["aws_access_key_id"] = store_config.access_key
        client_kwargs["aws_secret_access_key"] = store_config.secret_key.get_secret_value()
    return boto3.client(service_name, **client_kwargs)


__all__ = ["create_boto3_client"]
