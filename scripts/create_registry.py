#!/usr/bin/env python3
"""Register a container registry (and optionally namespaces) so its events resolve.

Usage:
    python scripts/create_registry.py registry registry.local:5000 --namespace team-a
"""
import argparse
import logging
import sys

from registry_hooks.core.db import session_scope
from registry_hooks.core.logging_config import configure_logging
from registry_hooks.services.namespace_repository import NamespaceRepository

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("name", help="Registry name, also used for its global namespace")
    parser.add_argument("hostname", help="Host the registry reports in its events (host[:port])")
    parser.add_argument("--external-hostname", default=None, help="Public hostname, if different")
    parser.add_argument("--namespace", action="append", default=[], help="Namespace to create (repeatable)")
    args = parser.parse_args()

    configure_logging()

    with session_scope() as session:
        repository = NamespaceRepository(session)
        registry = repository.create_registry(args.name, args.hostname, args.external_hostname)
        logger.info(f"Created registry {registry.name} (id={registry.id}) for host {registry.hostname}")
        for namespace in registry.namespaces:
            logger.info(f"  global namespace id={namespace.id}")
        for name in args.namespace:
            namespace = repository.create_namespace(registry.id, name)
            logger.info(f"  namespace {namespace.name} id={namespace.id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
