# SPDX-FileCopyrightText: 2020-present The Firebird Projects <www.firebirdsql.org>
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: peekaboo
# FILE:           peekaboo/trace.py
# DESCRIPTION:    Unobtrusive method call tracing
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

"""peekaboo - Unobtrusive method call tracing

This module provides call tracing for methods of classes, without changes in method bodies.

A class must have *tracing capability* before its methods could be traced. The capability
is granted explicitly by `include_tracing` or by subclassing `Traceable`, or lazily on first
use of the tracing API for classes registered with `Configuration.register_auto_grant`
(and their descendants), and for descendants of classes that already have it.

Traced methods are declared by name, separately for instance methods (plain functions)
and type methods (`classmethod` and `staticmethod`). Methods that already exist are wrapped
immediately, methods that do not exist yet are wrapped the moment they are defined.
Each call of wrapped method produces exactly one trace line passed to `info()` of the
configured trace sink::

    tests/test_trace.py:42:in `test_add'
    	( Invoking: Calculator#add with [1, 2] ==> Returning: 3 )

Example::

    from peekaboo.trace import Traceable, configure

    class Calculator(Traceable, type_methods=['add']):
        @classmethod
        def add(cls, a, b):
            return a + b

    configure(lambda config: config.set_sink(MySink()))
    Calculator.add(1, 2)

Note:
    Classes created by plain `type` cannot observe assignment of new attributes. Methods
    added to such classes after tracing was enabled must be defined with `define_method`,
    or tracing must be enabled again.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterable
from configparser import ConfigParser
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import partial, wraps
from inspect import isfunction
from threading import RLock, local
from types import MappingProxyType
from typing import Any
from weakref import WeakSet

from google.protobuf.struct_pb2 import Struct

from .config import BoolOption, Config, ConfigListOption, ListOption, StrOption
from .hooks import DefinitionEvent, hook_manager
from .logging import ConsoleSink, TraceSink, get_logger
from .types import (
    CapabilityMissingError,
    Error,
    IncompatibleSinkError,
    InvalidScopeError,
    InvalidTargetError,
    NotWrappedError,
    Scope,
    Singleton,
    load,
)

#: Name of class attribute holding the `TracedType`.
TRACED_ATTR: str = '_traced_type_'
#: Name of function attribute marking tracing wrappers.
WRAPPER_ATTR: str = '_peekaboo_wrapper_'
#: Names of operations required from trace sink.
SINK_OPERATIONS: tuple[str, ...] = ('debug', 'info', 'warn', 'error', 'fatal', 'unknown')
#: Names of tracing API entry points installed on traceable and auto-granted classes.
ENTRY_POINTS: tuple[str, ...] = ('enable_tracing', 'disable_tracing', 'traced_methods')
#: Type flag set on classes whose attributes cannot be assigned (Py_TPFLAGS_IMMUTABLETYPE).
TPFLAGS_IMMUTABLETYPE: int = 1 << 8

@dataclass
class TracedType:
    """Tracing state of a class with tracing capability.

    Stored in the class dictionary, so each class has its own instance and it's destroyed
    together with the class. Descendant classes do not share it.

    Arguments:
        name: Class name.
    """
    #: Class name.
    name: str
    #: Names of traced instance methods.
    instance_methods: set[str] = field(default_factory=set)
    #: Names of traced type methods.
    type_methods: set[str] = field(default_factory=set)
    #: Original class members replaced by tracing wrappers, keyed by (name, scope).
    originals: dict[tuple[str, Scope], Any] = field(default_factory=dict)
    #: Lock guarding this state and the class members it controls.
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)
    def methods(self, scope: Scope) -> set[str]:
        """Returns set of traced method names for scope.
        """
        return self.instance_methods if scope is Scope.INSTANCE else self.type_methods

def get_traced_type(cls: type) -> TracedType | None:
    """Returns `TracedType` owned by exactly this class, or None.
    """
    return cls.__dict__.get(TRACED_ATTR) if isinstance(cls, type) else None

def get_scope(member: Any) -> Scope | None:
    """Returns scope of class dictionary member, or None if member is not a method.
    """
    if isfunction(member):
        return Scope.INSTANCE
    if isinstance(member, (classmethod, staticmethod)):
        return Scope.TYPE
    return None

def is_mutable_type(cls: type) -> bool:
    """Returns True if attributes could be assigned to class (i.e. it's not a built-in
    or other immutable type).
    """
    return not cls.__flags__ & TPFLAGS_IMMUTABLETYPE

def is_wrapper(member: Any) -> bool:
    """Returns True if class dictionary member is a tracing wrapper.
    """
    if isinstance(member, (classmethod, staticmethod)):
        member = member.__func__
    return getattr(member, WRAPPER_ATTR, False)

def safe_repr(value: Any) -> str:
    """Returns `repr()` of value, or default object representation when `repr()` fails.
    """
    try:
        return repr(value)
    except Exception: # noqa: BLE001
        return object.__repr__(value)

def render_args(args: Iterable, kwargs: dict[str, Any]) -> str:
    """Returns trace representation of call arguments.
    """
    result = f"[{', '.join(safe_repr(arg) for arg in args)}]"
    if kwargs:
        result += f" and {{{', '.join(f'{k!r}: {safe_repr(v)}' for k, v in kwargs.items())}}}"
    return result

def render_error(exc: BaseException) -> str:
    """Returns exception message (or class name for empty message) as double quoted,
    escaped literal.
    """
    try:
        message = str(exc) or type(exc).__name__
    except Exception: # noqa: BLE001
        message = object.__repr__(exc)
    return json.dumps(message, ensure_ascii=False)

def publish_definition(cls: type, name: str, value: Any) -> None:
    """Notifies definition hooks registered for `cls` that method `name` was defined.

    Does nothing when `value` is not a method, or when it's a wrapper installed or removed
    by `trace_manager`.
    """
    if (scope := get_scope(value)) is None or trace_manager.installing:
        return
    event = DefinitionEvent.INSTANCE_METHOD_ADDED if scope is Scope.INSTANCE \
        else DefinitionEvent.TYPE_METHOD_ADDED
    for callback in hook_manager.get_callbacks(event, cls):
        callback(cls, event, name)

class _TracingEntry:
    """Descriptor that binds tracing API function to the class it's looked up on.
    """
    def __init__(self, name: str):
        self.name: str = name
    def __get__(self, instance: Any, owner: type | None=None) -> Callable:
        return partial(getattr(trace_manager, self.name),
                       type(instance) if owner is None else owner)

def install_entry_points(cls: type) -> None:
    """Installs tracing API entry points (`ENTRY_POINTS`) on class, unless the class
    already has attributes with these names.
    """
    for name in ENTRY_POINTS:
        if not hasattr(cls, name):
            type.__setattr__(cls, name, _TracingEntry(name))

class _ReentrancyGuard(local):
    #: True while the engine installs or removes a wrapper in current thread.
    active: bool = False

class TraceableMeta(type):
    """Metaclass that publishes `DefinitionEvent` when method is assigned to class.
    """
    def __setattr__(cls, name: str, value: Any) -> None:
        super().__setattr__(name, value)
        publish_definition(cls, name, value)

class Traceable(metaclass=TraceableMeta):
    """Mixin class that grants tracing capability to descendants.

    Descendants could specify traced methods directly in class definition::

        class Order(Traceable, instance_methods=['submit'], type_methods=['create']):
            ...

    Methods added or redefined later (by assignment to class attribute) are traced
    automatically when their names are registered.
    """
    enable_tracing = _TracingEntry('enable_tracing')
    disable_tracing = _TracingEntry('disable_tracing')
    traced_methods = _TracingEntry('traced_methods')
    def __init_subclass__(cls, /, instance_methods: Iterable[str]=(),
                          type_methods: Iterable[str]=(), **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        trace_manager.include_tracing(cls)
        if instance_methods or type_methods:
            trace_manager.enable_tracing(cls, instance_methods=instance_methods,
                                         type_methods=type_methods)

class TraceManager(Singleton):
    """Trace manager.

    Grants tracing capability to classes, maintains the registry of traced methods
    and installs or removes tracing wrappers.
    """
    _agent_name_ = 'trace_manager'
    def __init__(self):
        self._lock: RLock = RLock()
        self._guard: _ReentrancyGuard = _ReentrancyGuard()
    @contextmanager
    def _guarded(self):
        previous = self._guard.active
        self._guard.active = True
        try:
            yield
        finally:
            self._guard.active = previous
    def _method_defined(self, cls: type, event: DefinitionEvent, name: str) -> None:
        scope = Scope.INSTANCE if event is DefinitionEvent.INSTANCE_METHOD_ADDED else Scope.TYPE
        if (traced := get_traced_type(cls)) is not None and name in traced.methods(scope):
            self.wrap(cls, name, scope)
    def _get_capable(self, cls: type) -> TracedType:
        if not isinstance(cls, type):
            raise InvalidTargetError(f"Class expected, got {safe_repr(cls)}", target=cls)
        if (traced := get_traced_type(cls)) is None:
            if not (configuration.is_auto_granted(cls)
                    or any(self.is_capable(base) for base in cls.__mro__[1:])):
                raise CapabilityMissingError(f"Class '{cls.__name__}' has no tracing capability",
                                             name=cls.__name__)
            self.include_tracing(cls)
            traced = get_traced_type(cls)
        return traced
    def _make_wrapper(self, type_name: str, name: str, member: Any) -> Any:
        func = member.__func__ if isinstance(member, (classmethod, staticmethod)) else member
        skip = 0 if isinstance(member, staticmethod) else 1

        @wraps(func)
        def wrapper(*args, **kwargs):
            code = (frame := sys._getframe(1)).f_code
            line = f"{code.co_filename}:{frame.f_lineno}:in `{code.co_name}'\n" \
                f"\t( Invoking: {type_name}#{name} with {render_args(args[skip:], kwargs)} "
            del frame
            try:
                result = func(*args, **kwargs)
            except BaseException as exc:
                line += f"!!! Raising: {render_error(exc)} )"
                raise
            else:
                line += f"==> Returning: {safe_repr(result)} )"
                return result
            finally:
                configuration.get_sink().info(line)

        setattr(wrapper, WRAPPER_ATTR, True)
        if isinstance(member, classmethod):
            return classmethod(wrapper)
        if isinstance(member, staticmethod):
            return staticmethod(wrapper)
        return wrapper
    @property
    def installing(self) -> bool:
        """True while current thread installs or removes a tracing wrapper.
        """
        return self._guard.active
    def is_capable(self, cls: type) -> bool:
        """Returns True if class has tracing capability.
        """
        return get_traced_type(cls) is not None
    def is_wrapped(self, cls: type, name: str, scope: Scope) -> bool:
        """Returns True if method `name` of `scope` defined by `cls` is wrapped.
        """
        member = cls.__dict__.get(name)
        return get_scope(member) is scope and is_wrapper(member)
    def include_tracing(self, cls: type) -> None:
        """Grants tracing capability to class.

        Arguments:
            cls: Class that should be traceable.

        Raises:
            InvalidTargetError: When `cls` is not a class, or class attributes cannot be set.

        Does nothing if class already has tracing capability. Class gets `enable_tracing`,
        `disable_tracing` and `traced_methods` bound to it, unless it (or an ancestor)
        already defines them.
        """
        if not isinstance(cls, type):
            raise InvalidTargetError(f"Class expected, got {safe_repr(cls)}", target=cls)
        if not is_mutable_type(cls):
            raise InvalidTargetError(f"Class '{cls.__name__}' cannot be traced", target=cls)
        with self._lock:
            if TRACED_ATTR in cls.__dict__:
                return
            try:
                type.__setattr__(cls, TRACED_ATTR, TracedType(cls.__name__))
            except TypeError as exc:
                raise InvalidTargetError(f"Class '{cls.__name__}' cannot be traced",
                                         target=cls) from exc
            install_entry_points(cls)
            hook_manager.register_class(cls, DefinitionEvent)
            for event in DefinitionEvent:
                hook_manager.add_hook(event, cls, self._method_defined)
        get_logger(self, 'engine').debug(f"Tracing capability granted to '{cls.__name__}'")
    def wrap(self, cls: type, name: str, scope: Scope) -> None:
        """Replaces the method with tracing wrapper.

        Arguments:
            cls: Class with tracing capability.
            name: Method name.
            scope: Method scope.

        Raises:
            InvalidScopeError: When `scope` is not a `Scope` member.
            CapabilityMissingError: When class has no tracing capability.

        Does nothing when method is not defined by `cls` in given scope, or when
        it's already wrapped.
        """
        if not isinstance(scope, Scope):
            raise InvalidScopeError(f"Invalid method scope {safe_repr(scope)}", scope=scope)
        if (traced := get_traced_type(cls)) is None:
            raise CapabilityMissingError(f"Class '{cls.__name__}' has no tracing capability",
                                         name=cls.__name__)
        if self._guard.active:
            return
        with traced.lock:
            member = cls.__dict__.get(name)
            if get_scope(member) is not scope or is_wrapper(member):
                return
            traced.originals[(name, scope)] = member
            with self._guarded():
                setattr(cls, name, self._make_wrapper(cls.__name__, name, member))
        get_logger(self, 'engine').debug(f"Wrapped {scope.value} method '{cls.__name__}#{name}'")
    def unwrap(self, cls: type, name: str, scope: Scope) -> None:
        """Restores the original method replaced by tracing wrapper.

        Arguments:
            cls: Class with tracing capability.
            name: Method name.
            scope: Method scope.

        Raises:
            InvalidScopeError: When `scope` is not a `Scope` member.
            CapabilityMissingError: When class has no tracing capability.
            NotWrappedError: When method is not wrapped.
        """
        if not isinstance(scope, Scope):
            raise InvalidScopeError(f"Invalid method scope {safe_repr(scope)}", scope=scope)
        if (traced := get_traced_type(cls)) is None:
            raise CapabilityMissingError(f"Class '{cls.__name__}' has no tracing capability",
                                         name=cls.__name__)
        with traced.lock:
            if not self.is_wrapped(cls, name, scope) or (name, scope) not in traced.originals:
                raise NotWrappedError(f"Method '{cls.__name__}#{name}' is not wrapped",
                                      name=name, scope=scope)
            original = traced.originals.pop((name, scope))
            with self._guarded():
                setattr(cls, name, original)
        get_logger(self, 'engine').debug(f"Unwrapped {scope.value} method '{cls.__name__}#{name}'")
    def register(self, cls: type, names: str | Iterable[str], scope: Scope) -> None:
        """Registers methods for tracing, and wraps those that are already defined.

        Arguments:
            cls: Class with tracing capability (or eligible for auto-grant).
            names: Method name or iterable with method names.
            scope: Method scope.

        Registering already registered method does nothing.
        """
        if not isinstance(scope, Scope):
            raise InvalidScopeError(f"Invalid method scope {safe_repr(scope)}", scope=scope)
        traced = self._get_capable(cls)
        with traced.lock:
            for name in [names] if isinstance(names, str) else names:
                traced.methods(scope).add(name)
                self.wrap(cls, name, scope)
    def deregister(self, cls: type, names: str | Iterable[str], scope: Scope) -> None:
        """Removes methods from tracing, and restores the original of wrapped ones.

        Arguments:
            cls: Class with tracing capability (or eligible for auto-grant).
            names: Method name or iterable with method names.
            scope: Method scope.

        Names that are not registered are ignored.
        """
        if not isinstance(scope, Scope):
            raise InvalidScopeError(f"Invalid method scope {safe_repr(scope)}", scope=scope)
        traced = self._get_capable(cls)
        with traced.lock:
            for name in [names] if isinstance(names, str) else names:
                if name not in (methods := traced.methods(scope)):
                    continue
                methods.discard(name)
                if self.is_wrapped(cls, name, scope) and (name, scope) in traced.originals:
                    self.unwrap(cls, name, scope)
                else:
                    traced.originals.pop((name, scope), None)
    def enable_tracing(self, cls: type, *, instance_methods: str | Iterable[str]=(),
                       type_methods: str | Iterable[str]=()) -> None:
        """Enables tracing of class methods.

        Arguments:
            cls: Class with tracing capability (or eligible for auto-grant).
            instance_methods: Names of traced instance methods.
            type_methods: Names of traced class and static methods.

        Raises:
            CapabilityMissingError: When class has no tracing capability and it's not
                eligible for auto-grant.
        """
        self._get_capable(cls)
        self.register(cls, instance_methods, Scope.INSTANCE)
        self.register(cls, type_methods, Scope.TYPE)
    def disable_tracing(self, cls: type, *, instance_methods: str | Iterable[str]=(),
                        type_methods: str | Iterable[str]=()) -> None:
        """Disables tracing of class methods.

        Arguments:
            cls: Class with tracing capability (or eligible for auto-grant).
            instance_methods: Names of instance methods.
            type_methods: Names of class and static methods.

        Raises:
            CapabilityMissingError: When class has no tracing capability and it's not
                eligible for auto-grant.
        """
        self._get_capable(cls)
        self.deregister(cls, instance_methods, Scope.INSTANCE)
        self.deregister(cls, type_methods, Scope.TYPE)
    def traced_methods(self, cls: type) -> MappingProxyType:
        """Returns read-only mapping with names of traced methods.

        The mapping has keys `instance_methods` and `type_methods` with `frozenset` values.

        Raises:
            CapabilityMissingError: When class has no tracing capability and it's not
                eligible for auto-grant.
        """
        traced = self._get_capable(cls)
        with traced.lock:
            return MappingProxyType({'instance_methods': frozenset(traced.instance_methods),
                                     'type_methods': frozenset(traced.type_methods)})
    def define_method(self, cls: type, name: str, member: Any) -> None:
        """Assigns method to class, and notifies definition hooks.

        Use it to add methods to classes whose metaclass is not `TraceableMeta`.

        Arguments:
            cls: Class.
            name: Method name.
            member: Function, `classmethod` or `staticmethod`.
        """
        if not isinstance(cls, type):
            raise InvalidTargetError(f"Class expected, got {safe_repr(cls)}", target=cls)
        setattr(cls, name, member)
        if not isinstance(cls, TraceableMeta):
            publish_definition(cls, name, member)

class TracedClassConfig(Config):
    """Configuration section with traced methods of a Python class.

    The section name is referenced in `classes` option of main `TraceConfig` section.
    """
    def __init__(self, name: str):
        super().__init__(name)
        #: Class specification in format 'module:class' [required]
        self.source: StrOption = \
            StrOption('source', "Class specification in format 'module:class'", required=True)
        #: Names of traced instance methods
        self.instance_methods: ListOption = \
            ListOption('instance_methods', "Names of traced instance methods")
        #: Names of traced class and static methods
        self.type_methods: ListOption = \
            ListOption('type_methods', "Names of traced class and static methods")

class TraceConfig(Config):
    """Main tracing configuration section (typically '[peekaboo]').

    Example::

        [peekaboo]
        sink = myapp.logs:TraceSink
        auto_grant = myapp.models:Model
        classes = orders

        [orders]
        source = myapp.orders:Order
        instance_methods = submit, cancel
        type_methods = create
    """
    def __init__(self, name: str):
        super().__init__(name)
        #: Trace sink specification in format 'module:object'. Classes are instantiated.
        self.sink: StrOption = \
            StrOption('sink', "Trace sink specification in format 'module:object'")
        #: Specifications of classes registered for auto-grant
        self.auto_grant: ListOption = \
            ListOption('auto_grant', "Specifications of classes registered for auto-grant")
        #: When True, tracing capability is granted to listed classes that don't have it [default: True].
        self.autogrant: BoolOption = \
            BoolOption('autogrant',
                       "When True, tracing capability is granted to listed classes that don't have it",
                       default=True)
        #: Configuration sections with traced Python classes [required].
        self.classes: ConfigListOption = \
            ConfigListOption('classes', TracedClassConfig,
                             "Configuration sections with traced Python classes", required=True)

class Configuration(Singleton):
    """Tracing configuration.

    Holds the trace sink and the set of classes eligible for auto-grant of tracing
    capability. Use `configure` to change it.
    """
    def __init__(self):
        self._lock: RLock = RLock()
        self._sink: TraceSink | None = None
        self._auto_grant: WeakSet[type] = WeakSet()
    def get_sink(self) -> TraceSink:
        """Returns trace sink. Default `ConsoleSink` is created on first use.
        """
        if self._sink is None:
            with self._lock:
                if self._sink is None:
                    self._sink = ConsoleSink()
        return self._sink
    def set_sink(self, candidate: TraceSink) -> None:
        """Sets trace sink.

        Raises:
            IncompatibleSinkError: When `candidate` does not provide all operations
                required by `TraceSink`.
        """
        if not (isinstance(candidate, TraceSink)
                and all(callable(getattr(candidate, op)) for op in SINK_OPERATIONS)):
            raise IncompatibleSinkError("Sink must provide debug(), info(), warn(), error(), "
                                        "fatal(), and unknown()", sink=candidate)
        self._sink = candidate
    def register_auto_grant(self, *types: type) -> None:
        """Registers classes eligible for auto-grant of tracing capability.

        Registered classes and their descendants gain tracing capability on first use
        of tracing API (`enable_tracing`, `disable_tracing` or `traced_methods`).

        Raises:
            InvalidTargetError: When any argument is not a class, or it's an immutable
                (e.g. built-in) class. No class is registered in such case.
        """
        for cls in types:
            if not isinstance(cls, type):
                raise InvalidTargetError(f"Only classes could be registered for auto-grant, "
                                         f"got {safe_repr(cls)}", target=cls)
            if not is_mutable_type(cls):
                raise InvalidTargetError(f"Class '{cls.__name__}' cannot be traced", target=cls)
        with self._lock:
            for cls in types:
                if cls in self._auto_grant:
                    continue
                self._auto_grant.add(cls)
                install_entry_points(cls)
    auto_grant = register_auto_grant
    def is_auto_granted(self, cls: type) -> bool:
        """Returns True if class or any of its ancestors is registered for auto-grant.
        """
        if not isinstance(cls, type):
            return False
        with self._lock:
            return any(base in self._auto_grant for base in cls.__mro__)
    def reset(self) -> None:
        """Restores default trace sink and clears the set of auto-grant classes.
        """
        with self._lock:
            self._sink = None
            self._auto_grant = WeakSet()
    def apply_config(self, cfg: TraceConfig) -> None:
        """Applies configuration loaded into `TraceConfig`.

        Raises:
            Error: When configuration is not valid, or refers to class without
                tracing capability while `autogrant` is False.
        """
        cfg.validate()
        if (spec := cfg.sink.value) is not None:
            sink = load(spec)
            self.set_sink(sink() if isinstance(sink, type) else sink)
        if cfg.auto_grant.value:
            self.register_auto_grant(*(load(spec) for spec in cfg.auto_grant.value))
        for cls_cfg in cfg.classes.value:
            cls = load(cls_cfg.source.value)
            if not (trace_manager.is_capable(cls) or self.is_auto_granted(cls)):
                if not cfg.autogrant.value:
                    raise Error(f"Class '{cls_cfg.source.value}' has no tracing capability")
                trace_manager.include_tracing(cls)
            trace_manager.enable_tracing(cls, instance_methods=cls_cfg.instance_methods.value or (),
                                         type_methods=cls_cfg.type_methods.value or ())
    def load_config(self, config: ConfigParser, section: str='peekaboo') -> None:
        """Loads and applies tracing configuration from `ConfigParser` instance.

        Arguments:
            config:  `ConfigParser` instance with tracing configuration.
            section: Name of the main tracing configuration section.

        See `TraceConfig` for the structure of configuration.
        """
        cfg = TraceConfig(section)
        cfg.load_config(config, section)
        self.apply_config(cfg)
    def load_proto(self, proto: Struct) -> None:
        """Loads and applies tracing configuration from protobuf `Struct` message.

        The message has the structure produced by `TraceConfig.save_proto`.
        """
        cfg = TraceConfig('peekaboo')
        cfg.load_proto(proto)
        self.apply_config(cfg)
    @property
    def sink(self) -> TraceSink:
        """Trace sink.
        """
        return self.get_sink()
    @sink.setter
    def sink(self, value: TraceSink) -> None:
        self.set_sink(value)
    @property
    def auto_granted(self) -> frozenset[type]:
        """Classes registered for auto-grant of tracing capability.
        """
        with self._lock:
            return frozenset(self._auto_grant)

#: Trace manager singleton instance.
trace_manager: TraceManager = TraceManager()
#: Tracing configuration singleton instance.
configuration: Configuration = Configuration()

def configure(fn: Callable[[Configuration], Any]) -> Any:
    """Calls `fn` with tracing configuration and returns its result.

    Example::

        configure(lambda config: config.register_auto_grant(Model))
    """
    return fn(configuration)

#: Shortcut for `trace_manager.enable_tracing()`
enable_tracing = trace_manager.enable_tracing
#: Shortcut for `trace_manager.disable_tracing()`
disable_tracing = trace_manager.disable_tracing
#: Shortcut for `trace_manager.traced_methods()`
traced_methods = trace_manager.traced_methods
#: Shortcut for `trace_manager.include_tracing()`
include_tracing = trace_manager.include_tracing
#: Shortcut for `trace_manager.define_method()`
define_method = trace_manager.define_method
