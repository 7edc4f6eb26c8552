"""Constants for the CockroachDB Operator."""

# API Group
API_GROUP = "cockroachdb.crossplane.io"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_CLUSTER = "Cluster"
KIND_PROVIDER_CONFIG_USAGE = "ProviderConfigUsage"

# Plurals
PLURAL_CLUSTERS = "clusters"
PLURAL_PROVIDER_CONFIGS = "providerconfigs"
PLURAL_PROVIDER_CONFIG_USAGES = "providerconfigusages"

# Labels
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"
LABEL_PROVIDER_CONFIG = "crossplane.io/provider-config"

# Annotations
ANNOTATION_EXTERNAL_NAME = "crossplane.io/external-name"
ANNOTATION_CONNECTION_PUBLISHED = f"{API_GROUP}/connection-published"

# Finalizers
FINALIZER = f"{API_GROUP}/finalizer"

# Field Manager
FIELD_MANAGER = "cockroachdb-operator"

# Condition Types
COND_READY = "Ready"
COND_SYNCED = "Synced"

# Condition Reasons
REASON_AVAILABLE = "Available"
REASON_CREATING = "Creating"
REASON_UNAVAILABLE = "Unavailable"
REASON_DELETING = "Deleting"
REASON_RECONCILE_SUCCESS = "ReconcileSuccess"
REASON_RECONCILE_ERROR = "ReconcileError"

# Connection secret keys
CONNECTION_KEY_CA_CERT = "ca.crt"
CONNECTION_KEY_DSN = "dsn"

# Generated password secret
GENERATED_PASSWORD_SUFFIX = "generated-password"
GENERATED_PASSWORD_KEY = "password"

# Event Reasons
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_CLUSTER_CREATED = "CreatedExternalResource"
EVENT_REASON_CLUSTER_UPDATED = "UpdatedExternalResource"
EVENT_REASON_CLUSTER_DELETED = "DeletedExternalResource"
EVENT_REASON_CONNECTION_PUBLISHED = "PublishedConnectionDetails"
EVENT_REASON_CANNOT_CONNECT = "CannotConnectToProvider"
