"""Utilities for managing Kubernetes secrets."""

from __future__ import annotations

import base64
import binascii
from typing import Any

from kubernetes import client

from ..constants import FIELD_MANAGER, LABEL_MANAGED_BY
from ..exceptions import SecretKeyNotFoundError, SecretLookupError


def _decode(value: str | bytes, secret_name: str, key: str) -> bytes:
    """Decode a base64 secret data value into raw bytes.

    Raises:
        SecretLookupError: If the value is not valid base64
    """
    if isinstance(value, bytes):
        return value
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise SecretLookupError(f"secret '{secret_name}' key '{key}' is not valid base64") from e


def get_secret_bytes(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    key: str,
) -> bytes:
    """Get the raw bytes stored under a key of a Kubernetes secret.

    Args:
        api: Kubernetes API client
        namespace: Namespace of the secret
        secret_name: Name of the secret
        key: Key in the secret

    Returns:
        Secret value as bytes

    Raises:
        SecretKeyNotFoundError: If the secret has no such key
        SecretLookupError: If the secret cannot be read or its value is not base64
    """
    try:
        secret = api.read_namespaced_secret(name=secret_name, namespace=namespace)
    except client.exceptions.ApiException as e:
        if e.status == 404:
            raise SecretLookupError(f"secret '{secret_name}' not found in namespace '{namespace}'") from e
        raise SecretLookupError(f"cannot read secret '{secret_name}' in namespace '{namespace}': {e.reason}") from e

    data = secret.data or {}
    if key not in data:
        raise SecretKeyNotFoundError(key, secret_name)
    return _decode(data[key], secret_name, key)


def find_secret_bytes(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    key: str,
) -> bytes | None:
    """Like get_secret_bytes, but return None when the secret or key does not exist.

    Raises:
        SecretLookupError: If the secret exists but cannot be read
    """
    try:
        secret = api.read_namespaced_secret(name=secret_name, namespace=namespace)
    except client.exceptions.ApiException as e:
        if e.status == 404:
            return None
        raise SecretLookupError(f"cannot read secret '{secret_name}' in namespace '{namespace}': {e.reason}") from e

    value = (secret.data or {}).get(key)
    return _decode(value, secret_name, key) if value is not None else None


def upsert_secret(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    data: dict[str, bytes],
    owner_references: list[dict[str, Any]] | None = None,
) -> None:
    """Create a Kubernetes secret, or patch its data if it already exists.

    Args:
        api: Kubernetes API client
        namespace: Namespace for the secret
        secret_name: Name of the secret
        data: Secret data as raw bytes (will be base64 encoded)
        owner_references: Owner references for the secret
    """
    secret = client.V1Secret(
        metadata=client.V1ObjectMeta(
            name=secret_name,
            namespace=namespace,
            owner_references=owner_references or [],
            labels={LABEL_MANAGED_BY: FIELD_MANAGER},
        ),
        type="Opaque",
        data={k: base64.b64encode(v).decode("ascii") for k, v in data.items()},
    )

    try:
        api.create_namespaced_secret(
            namespace=namespace,
            body=secret,
            field_manager=FIELD_MANAGER,
        )
    except client.exceptions.ApiException as e:
        if e.status != 409:
            raise
        api.patch_namespaced_secret(
            name=secret_name,
            namespace=namespace,
            body={"data": secret.data},
            field_manager=FIELD_MANAGER,
        )
