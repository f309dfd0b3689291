"""
dub_bootstrap — standalone bootstrap builder for DUB.

Generates the version module, finds a D compiler, compiles the sources
listed in build-files.txt into bin/dub and smoke-tests the result.

No dependency resolution, no caching, no partial rebuilds.
"""

__version__ = "0.1.0"
PACKAGE_NAME = "dub_bootstrap"
SCHEMA_VERSION = "0.1"
