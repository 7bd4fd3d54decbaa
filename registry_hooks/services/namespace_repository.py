"""Lookup of registries and namespaces, including resolution from registry events."""
from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from registry_hooks.models.namespace import Namespace, Registry

logger = logging.getLogger(__name__)


class NamespaceRepository:
    """Handles database operations for Registry and Namespace entities."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create_registry(self, name: str, hostname: str, external_hostname: str | None = None) -> Registry:
        """Create a registry together with its global namespace."""
        registry = Registry(name=name, hostname=hostname, external_hostname=external_hostname)
        registry.namespaces.append(Namespace(name=name, is_global=True))
        self._session.add(registry)
        self._session.commit()
        self._session.refresh(registry)
        return registry

    def create_namespace(self, registry_id: int, name: str) -> Namespace:
        namespace = Namespace(registry_id=registry_id, name=name, is_global=False)
        self._session.add(namespace)
        self._session.commit()
        self._session.refresh(namespace)
        return namespace

    def get_by_id(self, namespace_id: int) -> Namespace | None:
        return self._session.get(Namespace, namespace_id)

    def find_registry_by_host(self, host: str) -> Registry | None:
        """Match the host a registry reported against hostname or external hostname."""
        registries = self._session.scalars(
            select(Registry).where(or_(Registry.hostname == host, Registry.external_hostname == host))
        ).all()
        # Internal hostname wins over an external alias
        for registry in registries:
            if registry.hostname == host:
                return registry
        return registries[0] if registries else None

    def get_from_repository_name(self, repository: str, registry: Registry) -> Namespace | None:
        """Namespace owning ``repository``.

        ``team/app`` lives in namespace ``team``; a bare ``app`` lives in the
        registry's global namespace.
        """
        if "/" in repository:
            namespace_name = repository.split("/", 1)[0]
            condition = Namespace.name == namespace_name
        else:
            condition = Namespace.is_global.is_(True)
        return self._session.scalars(
            select(Namespace).where(Namespace.registry_id == registry.id, condition)
        ).first()

    def resolve_from_event(self, event: Mapping[str, Any]) -> Namespace | None:
        """Namespace a registry event refers to, or None when it can't be resolved."""
        host = _lookup(event, "request", "host")
        repository = _lookup(event, "target", "repository")
        if not host or not repository:
            logger.debug("Ignoring event without request host or target repository")
            return None

        registry = self.find_registry_by_host(host)
        if registry is None:
            logger.info(f"Ignoring event coming from unknown registry {host}")
            return None

        namespace = self.get_from_repository_name(repository, registry)
        if namespace is None:
            logger.debug(f"No namespace for repository {repository} on registry {registry.name}")
        return namespace


def _lookup(event: Mapping[str, Any], section: str, key: str) -> str | None:
    value = event.get(section)
    if not isinstance(value, Mapping):
        return None
    found = value.get(key)
    return found if isinstance(found, str) else None
