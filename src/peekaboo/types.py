# SPDX-FileCopyrightText: 2020-present The Firebird Projects <www.firebirdsql.org>
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: peekaboo
# FILE:           peekaboo/types.py
# DESCRIPTION:    Types and exceptions
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

"""peekaboo - Types and exceptions

This module provides the building blocks shared by other `peekaboo` modules:

- The base exception class (`Error`) and the exceptions raised by the tracing engine.
- The `Scope` enumeration that distinguishes instance-scoped and type-scoped methods.
- Utilities for creating Singletons (`Singleton`).
- Metaclass utilities (`conjunctive`).
- Helper functions (`load`).
"""

from __future__ import annotations

import sys
from enum import Enum
from importlib import import_module
from typing import Any

# Exceptions

class Error(Exception):
    """Exception intended as a base for all `peekaboo` errors.

    Unlike the standard `Exception`, this class accepts arbitrary keyword
    arguments during initialization. These keyword arguments are stored as
    attributes on the exception instance.

    Important:
        Attribute lookup on this class never fails, as all attributes that are not actually
        set, have `None` value. The special attribute `__notes__` is explicitly excluded
        from this behavior to keep exception notes working.

    Example::

        try:
            trace_manager.unwrap(Order, 'submit', Scope.INSTANCE)
        except NotWrappedError as e:
            print(e.name, e.scope)
    """
    def __init__(self, *args, **kwargs):
        super().__init__(*args)
        for name, value in kwargs.items():
            setattr(self, name, value)
    def __getattr__(self, name) -> Any | None:
        if name == '__notes__':
            raise AttributeError
        return None

class IncompatibleSinkError(Error, TypeError):
    """Raised when trace sink does not provide all six severity operations.
    """

class InvalidTargetError(Error, TypeError):
    """Raised when a class is expected, but something else was passed.
    """

class CapabilityMissingError(Error, AttributeError):
    """Raised when tracing is requested for a class that has no tracing capability
    and is not eligible for automatic grant.
    """

class InvalidScopeError(Error, ValueError):
    """Raised when method scope is not a `Scope` member.
    """

class NotWrappedError(Error, LookupError):
    """Raised when unwrap is requested for a method that is not wrapped.
    """

# Enums

class Scope(Enum):
    """Method scope.
    """
    #: Method invoked on class instances (plain function in class dictionary).
    INSTANCE = 'instance'
    #: Method invoked on the class itself (`classmethod` or `staticmethod`).
    TYPE = 'type'

# Singletons

_singletons_ = {}

class SingletonMeta(type):
    """Metaclass for `Singleton` classes.

    Manages internal cache of class instances. If instance for a class is in cache, it's
    returned without calling the constructor, otherwise the instance is created normally
    and stored in cache for later use.
    """
    def __call__(cls: type[Singleton], *args, **kwargs) -> Singleton:
        name = f"{cls.__module__}.{cls.__qualname__}"
        obj = _singletons_.get(name)
        if obj is None:
            obj = super().__call__(*args, **kwargs)
            _singletons_[name] = obj
        return obj

class Singleton(metaclass=SingletonMeta):
    """Base class for singletons.

    Ensures that only one instance of a class derived from `Singleton` exists.
    Subsequent attempts to 'create' an instance will return the existing one,
    and `__init__` is not called again.
    """

# Metaclasses

def conjunctive(name, bases, attrs) -> type:
    """Returns a class created by metaclass that is conjunctive descendant of all
    metaclasses used by parent classes. It's necessary to create a class with multiple
    inheritance, where parent classes use different metaclasses.

    Example::

        from abc import ABC, abstractmethod

        class Repository(ABC, Traceable, metaclass=conjunctive):
            @abstractmethod
            def fetch(self, key): ...
    """
    basemetaclasses = []
    for base in bases:
        metacls = type(base)
        if isinstance(metacls, type) and metacls is not type and metacls not in basemetaclasses:
            basemetaclasses.append(metacls)
    dynamic = type(''.join(b.__name__ for b in basemetaclasses), tuple(basemetaclasses), {})
    return dynamic(name, bases, attrs)

# Functions

def load(spec: str) -> Any:
    """Dynamically load an object (class, function, variable) from a module.

    The module is imported automatically if it hasn't been already.

    Arguments:
        spec: Object specification string in the format
              `'module[.submodule...]:object_name[.attribute...]'`.

    Raises:
        ValueError: If `spec` does not contain exactly one colon.
        ImportError: If the module cannot be imported.
        AttributeError: If the specified object cannot be found within the module.

    Example::

        Order = load("shop.orders:Order")
    """
    if spec.count(':') != 1:
        raise ValueError(f"Invalid object specification '{spec}'")
    module_spec, name = (part.strip() for part in spec.split(':'))
    if module_spec in sys.modules:
        module = sys.modules[module_spec]
    else:
        module = import_module(module_spec)
    result = module
    for item in name.split('.'):
        result = getattr(result, item)
    return result
