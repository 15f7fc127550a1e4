"""Handler modules for watched resources."""

# Import handlers to register them - all handlers register themselves via @kopf decorators
from . import bare_metal_host  # noqa: F401
from . import cluster_config  # noqa: F401
