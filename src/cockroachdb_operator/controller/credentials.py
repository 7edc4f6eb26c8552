"""Credential extraction and SQL user password resolution."""

from __future__ import annotations

import logging
import os
import secrets
import string
from typing import Any

from kubernetes import client

from .. import config
from ..builders.cluster import SecretKeySelector
from ..constants import GENERATED_PASSWORD_KEY, GENERATED_PASSWORD_SUFFIX
from ..exceptions import PasswordGenerationError
from ..resources.cluster import ClusterResource
from ..utils.secrets import find_secret_bytes, get_secret_bytes, upsert_secret

logger = logging.getLogger(__name__)

PASSWORD_LENGTH = 16
PASSWORD_DIGITS = 4

SOURCE_SECRET = "Secret"
SOURCE_ENVIRONMENT = "Environment"
SOURCE_FILESYSTEM = "Filesystem"


def extract_credentials(api: client.CoreV1Api, credentials: dict[str, Any]) -> bytes:
    """Extract raw credential bytes from a provider config credentials block.

    Args:
        api: Kubernetes API client
        credentials: ProviderConfig spec.credentials

    Returns:
        Raw credential bytes (the API key)

    Raises:
        ValueError: If the source is unsupported or incompletely configured
        SecretLookupError: If the referenced secret or key cannot be read
        OSError: If a referenced file cannot be read
    """
    source = credentials.get("source")

    if source == SOURCE_SECRET:
        ref = credentials.get("secretRef") or {}
        if not ref.get("name") or not ref.get("namespace") or not ref.get("key"):
            raise ValueError("secretRef must specify namespace, name and key")
        return get_secret_bytes(api, ref["namespace"], ref["name"], ref["key"])

    if source == SOURCE_ENVIRONMENT:
        env_name = (credentials.get("env") or {}).get("name")
        if not env_name:
            raise ValueError("env.name is required")
        if env_name not in os.environ:
            raise ValueError(f"environment variable {env_name} is not set")
        return os.environ[env_name].encode("utf-8")

    if source == SOURCE_FILESYSTEM:
        path = (credentials.get("fs") or {}).get("path")
        if not path:
            raise ValueError("fs.path is required")
        with open(path, "rb") as f:
            return f.read()

    raise ValueError(f"no extraction handler registered for source: {source}")


def generate_password(length: int = PASSWORD_LENGTH, num_digits: int = PASSWORD_DIGITS) -> str:
    """Generate a random alphanumeric password.

    The password holds exactly num_digits digits; the rest are upper and
    lower case letters. No symbols are used and no character repeats.

    Raises:
        PasswordGenerationError: If the counts cannot be met without repeats
    """
    if length <= 0 or num_digits < 0 or num_digits > length:
        raise PasswordGenerationError(
            f"error generating random password: cannot fit {num_digits} digits in {length} characters"
        )
    if num_digits > len(string.digits) or length - num_digits > len(string.ascii_letters):
        raise PasswordGenerationError(
            f"error generating random password: not enough distinct characters for {length} characters"
        )

    rng = secrets.SystemRandom()
    chars = rng.sample(string.digits, num_digits) + rng.sample(string.ascii_letters, length - num_digits)
    rng.shuffle(chars)
    return "".join(chars)


def get_password(api: client.CoreV1Api, secret_ref: SecretKeySelector | None) -> bytes:
    """Return the password stored at secret_ref, or a fresh one when it is None.

    Generating is not idempotent; see resolve_password for the persisted variant.

    Raises:
        SecretKeyNotFoundError: If the secret lacks the referenced key
        SecretLookupError: If the secret cannot be read
        PasswordGenerationError: If generation fails
    """
    if secret_ref is None:
        return generate_password().encode("utf-8")
    return get_secret_bytes(api, secret_ref.namespace, secret_ref.name, secret_ref.key)


def generated_password_secret(resource: ClusterResource) -> tuple[str, str]:
    """Namespace and name of the secret holding a cluster's generated password."""
    ref = resource.connection_secret_ref
    namespace = ref["namespace"] if ref else config.DEFAULT_SECRET_NAMESPACE
    return namespace, f"{resource.name}-{GENERATED_PASSWORD_SUFFIX}"


def resolve_password(api: client.CoreV1Api, resource: ClusterResource) -> bytes:
    """Resolve the SQL user password for a cluster.

    A referenced secret always wins. Otherwise a generated password is read
    back from its own secret, or generated and stored there before it is
    returned, so retries reuse the same value.
    """
    secret_ref = resource.parameters.password_secret_ref
    if secret_ref is not None:
        return get_password(api, secret_ref)

    namespace, secret_name = generated_password_secret(resource)
    existing = find_secret_bytes(api, namespace, secret_name, GENERATED_PASSWORD_KEY)
    if existing:
        return existing

    password = get_password(api, None)
    upsert_secret(
        api,
        namespace,
        secret_name,
        {GENERATED_PASSWORD_KEY: password},
        owner_references=[resource.owner_reference()],
    )
    logger.info(f"Stored generated password for cluster {resource.name} in secret {namespace}/{secret_name}")
    return password
