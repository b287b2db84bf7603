"""Version information for Easel."""

# Semantic versioning: MAJOR.MINOR.PATCH
# MAJOR: Breaking changes to API or data structures
# MINOR: New features, backward compatible
# PATCH: Bug fixes, backward compatible

__version__ = "0.3.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 0.3.0 - Zero-downtime site rebuilds
#         - Rebuild orchestrator with staging build, atomic swap and rollback
#         - Cooldown and in-progress guards, status polling endpoint
# 0.2.0 - Pluggable document store
#         - Embedded file store alongside MongoDB, automatic failover at startup
#         - Stable numeric public ids across both backends
# 0.1.0 - Initial release
#         - Artworks, artist info, FAQs, site settings and user management
