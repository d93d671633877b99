# SPDX-FileCopyrightText: 2020-present The Firebird Projects <www.firebirdsql.org>
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: peekaboo
# FILE:           peekaboo/hooks.py
# DESCRIPTION:    Hook manager
# CREATED:        3.2.2021
#
# The contents of this file are subject to the MIT License
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#
# Copyright (c) 2020 Firebird Project (www.firebirdsql.org)
# All Rights Reserved.
#
# Contributor(s): Pavel Císař (original code)
#                 ______________________________________

"""peekaboo - Hook manager

This module provides a small publish-subscribe framework for events raised by classes.

* The `Event source` is a class registered with `HookManager.register_class` together
  with the set of events it provides.
* `Event` is a value (typically an `~enum.Enum` member) unique for the event source.
* `Event provider` is the code that asks `hook_manager` for callbacks registered for
  particular event and source, and calls them.
* `Event consumer` is a callable registered with `HookManager.add_hook`.

Unlike hooks on instances, class hooks in this module are bound to *exact* class.
Callbacks registered for a class are not returned for its subclasses, so each class
maintains its own subscriptions. Classes are held weakly, registrations disappear
together with the class.

The tracing engine uses this module to observe method definitions on traced classes
(see `DefinitionEvent`).

Example::

    from enum import Enum, auto
    from peekaboo.hooks import hook_manager

    class MyEvents(Enum):
        CREATE = auto()

    class MyHookable:
        def __init__(self):
            for hook in hook_manager.get_callbacks(MyEvents.CREATE, self.__class__):
                hook(self.__class__, MyEvents.CREATE)

    hook_manager.register_class(MyHookable, MyEvents)
    hook_manager.add_hook(MyEvents.CREATE, MyHookable, lambda cls, event: print(cls, event))
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any
from weakref import WeakKeyDictionary

from .types import Singleton


class DefinitionEvent(Enum):
    """Events published when a method is (re)defined on a class.

    Callback signature: `callback(cls: type, event: DefinitionEvent, name: str) -> None`
    """
    #: Function assigned to class attribute
    INSTANCE_METHOD_ADDED = auto()
    #: `classmethod` or `staticmethod` assigned to class attribute
    TYPE_METHOD_ADDED = auto()

@dataclass
class Hook:
    """Represents callbacks registered for one event of one class.

    Arguments:
        event: The event this hook subscribes to.
        callbacks: Callables executed when the event occurs.
    """
    #: The event this hook subscribes to.
    event: Any
    #: Callables executed when the event occurs.
    callbacks: list[Callable] = field(default_factory=list)

class HookManager(Singleton):
    """Manages the registration and retrieval of hooks (callbacks) for classes.
    """
    def __init__(self):
        self.hookables: WeakKeyDictionary[type, set[Any]] = WeakKeyDictionary()
        self.hooks: WeakKeyDictionary[type, dict[Any, Hook]] = WeakKeyDictionary()
    def register_class(self, cls: type, events: type[Enum] | set | None=None) -> None:
        """Register a class as being capable of generating hookable events.

        Arguments:
            cls: The class that acts as an event source.
            events: The set of events this class can trigger. Can be specified using an
                    `~enum.Enum` type, a `set` of event identifiers, or `None`.

        Raises:
            TypeError: If `cls` is not a class, or `events` is not an Enum type or a set.

        Registering already registered class extends its set of events.
        """
        if not isinstance(cls, type):
            raise TypeError("Only classes could be registered as hookable")
        event_set = set()
        if events is not None:
            if isinstance(events, type) and issubclass(events, Enum):
                event_set = set(events.__members__.values())
            elif isinstance(events, set):
                event_set = events
            else:
                raise TypeError("`events` must be an Enum type or a set")
        self.hookables.setdefault(cls, set()).update(event_set)
    def is_hookable(self, cls: type) -> bool:
        """Returns True if class is registered as hookable.
        """
        return cls in self.hookables
    def add_hook(self, event: Any, cls: type, callback: Callable) -> None:
        """Register a callback for a specific event raised by a specific class.

        Arguments:
            event:    The event identifier.
            cls:      A class registered via `register_class`.
            callback: The callable to be called when the event occurs.

        Raises:
            TypeError: If `cls` is not registered as hookable.
            ValueError: If `event` is not supported by `cls`.

        Adding the same callback for the same event and class again does nothing.
        """
        if cls not in self.hookables:
            raise TypeError("The type is not registered as hookable")
        if event not in self.hookables[cls]:
            raise ValueError(f"Event '{event}' is not supported by '{cls.__name__}'")
        hooks = self.hooks.setdefault(cls, {})
        hook = hooks.setdefault(event, Hook(event))
        if callback not in hook.callbacks:
            hook.callbacks.append(callback)
    def remove_hook(self, event: Any, cls: type, callback: Callable) -> None:
        """Remove a previously registered hook callback.

        Does nothing if no matching hook registration is found.
        """
        hooks = self.hooks.get(cls)
        if hooks is not None and (hook := hooks.get(event)) is not None:
            if callback in hook.callbacks:
                hook.callbacks.remove(callback)
            if not hook.callbacks:
                del hooks[event]
    def remove_all_hooks(self) -> None:
        """Removes all installed hooks.
        """
        self.hooks.clear()
    def reset(self) -> None:
        """Removes all installed hooks and unregisters all hookable classes.
        """
        self.remove_all_hooks()
        self.hookables.clear()
    def get_callbacks(self, event: Any, cls: type) -> list[Callable]:
        """Returns list of callbacks registered for event raised by *exactly* this class.
        """
        hooks = self.hooks.get(cls)
        if hooks is None or (hook := hooks.get(event)) is None:
            return []
        return list(hook.callbacks)

#: Hook manager singleton instance.
hook_manager: HookManager = HookManager()

#: Shortcut for `hook_manager.register_class()`
register_class = hook_manager.register_class
#: Shortcut for `hook_manager.add_hook()`
add_hook = hook_manager.add_hook
#: Shortcut for `hook_manager.get_callbacks()`
get_callbacks = hook_manager.get_callbacks
