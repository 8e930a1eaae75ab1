from __future__ import annotations

import occupancy
import threading

from contextlib import contextmanager
from functools import cached_property

from occupancy.modules import errors


from typing import Any
from typing import NamedTuple
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Iterator
    from sqlalchemy.orm import Session

    from occupancy.context.locks import PropertyLocks
    from occupancy.context.registry import Registry
    from occupancy.context.session import SessionProvider


class StoppableService:
    """ Services inheriting from this class have their stop_service method
    called when the context discards them.

    Note that this only happens when a service is replaced or its context
    is registered anew, not when occupancy is stopped (i.e. this is *not* a
    deconstructor).

    """

    def stop_service(self) -> None:
        pass


class ServiceFactory(NamedTuple):
    """ Creates a service for the context asking for it. Cached services
    are created once per context, the others on every lookup.

    """

    create: Callable[[Context], Any]
    cached: bool = False


class ContextServicesMixin:
    """ Shortcuts to the services of a context, for classes holding one
    as self.context.

    The email validator is looked up once per instance. Call
    :meth:`clear_cache` after replacing it on the context.

    """

    context: Context

    @cached_property
    def validate_email(self) -> Callable[[str], bool]:
        validator: Callable[[str], bool]
        validator = self.context.get_service('email_validator')
        return validator

    def clear_cache(self) -> None:
        self.__dict__.pop('validate_email', None)

    @property
    def session_provider(self) -> SessionProvider:
        provider: SessionProvider
        provider = self.context.get_service('session_provider')
        return provider

    @property
    def property_locks(self) -> PropertyLocks:
        locks: PropertyLocks = self.context.get_service('property_locks')
        return locks

    @property
    def session(self) -> Session:
        """ The session of the current thread. """
        session: Session = self.session_provider.session()
        return session

    def close(self) -> None:
        self.session.close()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class Context:
    """ Holds the settings (e.g. the database to connect to) and the
    services (e.g. the e-mail validator) occupancy uses.

    Each consumer of occupancy registers a context of its own, so several
    of them may live in a single process, each with its own database. A
    context falls back to its parent for any setting or service it doesn't
    define itself. The parent of all contexts is the master context of the
    registry, which carries the defaults and is locked against changes.

    Services registered with ``cache=True`` are created once per context,
    even if the factory was inherited from the parent. Two contexts never
    share a session provider this way, not even if they connect to the
    same database.

    A context is registered like this::

        from occupancy import registry
        my_context = registry.register_context('my_app')
        my_context.set_setting('dsn', 'postgresql+psycopg2://...')

    See also :class:`~occupancy.context.registry.Registry`

    """

    def __init__(
        self,
        name: str,
        registry: Registry | None = None,
        parent: Context | None = None,
        locked: bool = False
    ):
        self.name = name
        self.registry = registry or occupancy.registry
        self.parent = parent
        self.locked = locked
        self.settings: dict[str, Any] = {}
        self.factories: dict[str, ServiceFactory] = {}
        self.instances: dict[str, Any] = {}
        self.thread_lock = threading.RLock()

    def __repr__(self) -> str:
        return f"<Occupancy Context(name='{self.name}')>"

    @contextmanager
    def as_current_context(self) -> Iterator[Context]:
        with self.registry.context(self.name) as context:
            yield context

    def switch_to(self) -> None:
        self.registry.switch_context(self.name)

    def lock(self) -> None:
        with self.thread_lock:
            self.locked = True

    def unlock(self) -> None:
        with self.thread_lock:
            self.locked = False

    def assert_unlocked(self) -> None:
        if self.locked:
            raise errors.ContextIsLocked(self.name)

    def get_setting(self, name: str) -> Any:
        """ Returns the setting of this context or of its parents, None if
        nobody defines it.

        """
        if name in self.settings:
            return self.settings[name]

        if self.parent is not None:
            return self.parent.get_setting(name)

        return None

    def set_setting(self, name: str, value: Any) -> None:
        self.assert_unlocked()

        with self.thread_lock:
            self.settings[name] = value

    def get_factory(self, name: str) -> ServiceFactory:
        if name in self.factories:
            return self.factories[name]

        if self.parent is not None:
            return self.parent.get_factory(name)

        raise errors.UnknownService(name)

    def get_service(self, name: str) -> Any:
        factory = self.get_factory(name)

        if not factory.cached:
            return factory.create(self)

        with self.thread_lock:
            if name not in self.instances:
                self.instances[name] = factory.create(self)

            return self.instances[name]

    def set_service(
        self,
        name: str,
        factory: Callable[[Context], Any],
        cache: bool = False
    ) -> None:
        self.assert_unlocked()

        with self.thread_lock:
            self.discard_service(name)
            self.factories[name] = ServiceFactory(factory, cache)

    def discard_service(self, name: str) -> None:
        """ Forgets the cached instance of the given service, stopping it
        so it may release its connections.

        """
        with self.thread_lock:
            service = self.instances.pop(name, None)

        if isinstance(service, StoppableService):
            service.stop_service()

    def discard_services(self) -> None:
        for name in list(self.instances):
            self.discard_service(name)
