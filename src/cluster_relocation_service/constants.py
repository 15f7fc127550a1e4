"""Constants for the Cluster Relocation Service."""

# API Group
API_GROUP = "relocation.openshift.io"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_CLUSTER_CONFIG = "ClusterConfig"
PLURAL_CLUSTER_CONFIG = "clusterconfigs"

# BareMetalHost (metal3.io) - owned by the baremetal-operator
BMH_GROUP = "metal3.io"
BMH_VERSION = "v1alpha1"
BMH_GROUP_VERSION = f"{BMH_GROUP}/{BMH_VERSION}"
KIND_BARE_METAL_HOST = "BareMetalHost"
PLURAL_BARE_METAL_HOST = "baremetalhosts"
BMH_DISK_FORMAT_LIVE_ISO = "live-iso"

# Relocation descriptor
KIND_CLUSTER_RELOCATION = "ClusterRelocation"
CLUSTER_RELOCATION_GROUP = "rhsyseng.github.io"

# Finalizers
FINALIZER = f"clusterconfig.{API_GROUP}/deprovision"

# Annotation bumped on a ClusterConfig to request a reconcile when its BareMetalHost changes
ANNOTATION_HOST_GENERATION = f"{API_GROUP}/bare-metal-host-generation"

# Field Manager
FIELD_MANAGER = "cluster-relocation-service"
CONTROLLER_NAME = "cluster-relocation-service"

# Exported files
FILES_DIR_NAME = "files"
NAMESPACES_DIR_NAME = "namespaces"
LOCK_FILE_NAME = ".lock"
FILE_CLUSTER_RELOCATION = "cluster-relocation.json"
FILE_API_CERT = "api-cert-secret.json"
FILE_INGRESS_CERT = "ingress-cert-secret.json"
FILE_PULL_SECRET = "pull-secret-secret.json"
FILE_ACM_SECRET = "acm-secret.json"

# Requeue delay used for lock contention
LOCK_RETRY_DELAY_SECONDS = 5.0

# Condition Types
COND_READY = "Ready"

# Condition Reasons
REASON_RECONCILE_SUCCEEDED = "ReconciliationSucceeded"
REASON_RECONCILE_FAILED = "ReconciliationFailed"
REASON_RECONCILE_IN_PROGRESS = "ReconcileInProgress"

# Event Reasons
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_FILES_EXPORTED = "FilesExported"
EVENT_REASON_HOST_IMAGE_SET = "HostImageSet"
EVENT_REASON_HOST_IMAGE_CLEARED = "HostImageCleared"
EVENT_REASON_CLEANUP_COMPLETED = "CleanupCompleted"
