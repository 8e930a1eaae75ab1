from __future__ import annotations

import re
import threading

from contextlib import contextmanager

from occupancy.context.core import Context
from occupancy.modules import errors


from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Iterator

    from occupancy.context.locks import PropertyLocks
    from occupancy.context.session import SessionProvider


EMAIL_EXPRESSION = re.compile(r'[^@\s]+@[^@\s]+\.[^@\s]+')


def is_valid_email(email: str) -> bool:
    """ A syntactic check only. Replace the email_validator service of
    your context for anything stricter.

    """
    return EMAIL_EXPRESSION.fullmatch(email) is not None


def email_validator(context: Context) -> Callable[[str], bool]:
    return is_valid_email


def session_provider(context: Context) -> SessionProvider:
    from occupancy.context.session import SessionProvider

    return SessionProvider(
        context.get_setting('dsn'),
        isolation_level=context.get_setting('isolation_level')
    )


def property_locks(context: Context) -> PropertyLocks:
    from occupancy.context.locks import PropertyLocks

    return PropertyLocks()


def create_default_registry() -> Registry:
    """ Creates a registry whose master context provides the default
    settings and services of occupancy.

    """
    from occupancy.context.settings import set_default_settings

    registry = Registry()

    master = registry.master_context
    master.set_service('email_validator', email_validator)
    master.set_service('session_provider', session_provider, cache=True)
    master.set_service('property_locks', property_locks, cache=True)

    set_default_settings(master)

    master.lock()

    return registry


class Registry:
    """ Knows all contexts by name and which of them is the current one.
    The current context is kept per thread.

    The registry used by default is found in occupancy::

        from occupancy import registry

    To stay clear of global state, create a registry of your own::

        from occupancy.context.registry import create_default_registry
        registry = create_default_registry()

    """

    def __init__(self) -> None:
        self.thread_lock = threading.RLock()
        self.local = threading.local()
        self.master_context = Context('master', registry=self)
        self.contexts: dict[str, Context] = {'master': self.master_context}

    @property
    def current_context(self) -> Context:
        context: Context
        context = getattr(self.local, 'current_context', self.master_context)
        return context

    def is_existing_context(self, name: str) -> bool:
        return name in self.contexts

    def register_context(self, name: str, replace: bool = False) -> Context:
        """ Registers a new context inheriting from the master context.

        Replacing a context stops the services it created, releasing any
        connections they hold. Locked contexts can't be replaced.

        """
        with self.thread_lock:
            existing = self.contexts.get(name)

            if existing is not None:
                if not replace:
                    raise errors.ContextAlreadyExists(name)

                existing.assert_unlocked()
                existing.discard_services()

            context = Context(name, registry=self, parent=self.master_context)
            self.contexts[name] = context

            return context

    def get_context(self, name: str, autocreate: bool = False) -> Context:
        with self.thread_lock:
            if name in self.contexts:
                return self.contexts[name]

            if not autocreate:
                raise errors.UnknownContext(name)

            return self.register_context(name)

    def switch_context(self, name: str) -> None:
        self.local.current_context = self.get_context(name)

    @contextmanager
    def context(self, name: str) -> Iterator[Context]:
        """ Makes the given context the current one for the duration of the
        with block.

        """
        previous = self.current_context
        self.switch_context(name)

        try:
            yield self.current_context
        finally:
            self.local.current_context = previous
