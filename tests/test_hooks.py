# SPDX-FileCopyrightText: 2020-present The Firebird Projects <www.firebirdsql.org>
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: peekaboo
# FILE:           tests/test_hooks.py
# DESCRIPTION:    Tests for peekaboo.hooks
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

"""Unit tests for the peekaboo.hooks module."""

from __future__ import annotations

import gc
from enum import Enum, auto

import pytest

from peekaboo.hooks import DefinitionEvent, HookManager, add_hook, get_callbacks, hook_manager

# --- Test Setup & Fixtures ---

class MyEvents(Enum):
    """Sample events for testing."""
    CREATE = auto()
    DELETE = auto()

class Output:
    """Simple output collector for tests."""
    def __init__(self):
        self.output: list[str] = []
    def callback(self, cls: type, event: MyEvents) -> None:
        self.output.append(f"{cls.__name__}:{event.name}")

def make_hookable() -> type:
    class MyHookable:
        def __init__(self):
            for hook in hook_manager.get_callbacks(MyEvents.CREATE, self.__class__):
                hook(self.__class__, MyEvents.CREATE)
    hook_manager.register_class(MyHookable, MyEvents)
    return MyHookable

# --- Test Functions ---

def test_singleton():
    assert HookManager() is hook_manager

def test_register_class():
    cls = make_hookable()
    assert hook_manager.is_hookable(cls)
    assert hook_manager.hookables[cls] == {MyEvents.CREATE, MyEvents.DELETE}
    hook_manager.register_class(cls, {'custom'})
    assert 'custom' in hook_manager.hookables[cls]

    class Plain:
        pass

    assert not hook_manager.is_hookable(Plain)
    hook_manager.register_class(Plain)
    assert hook_manager.hookables[Plain] == set()
    with pytest.raises(TypeError, match="Only classes"):
        hook_manager.register_class(Plain(), MyEvents)
    with pytest.raises(TypeError, match="must be an Enum type or a set"):
        hook_manager.register_class(Plain, [MyEvents.CREATE])

def test_add_hook():
    cls = make_hookable()
    out = Output()
    add_hook(MyEvents.CREATE, cls, out.callback)
    add_hook(MyEvents.CREATE, cls, out.callback)
    assert get_callbacks(MyEvents.CREATE, cls) == [out.callback]
    assert get_callbacks(MyEvents.DELETE, cls) == []
    cls()
    assert out.output == ["MyHookable:CREATE"]
    with pytest.raises(ValueError, match="not supported"):
        add_hook(DefinitionEvent.INSTANCE_METHOD_ADDED, cls, out.callback)

    class Plain:
        pass

    with pytest.raises(TypeError, match="not registered as hookable"):
        add_hook(MyEvents.CREATE, Plain, out.callback)

def test_hooks_bound_to_exact_class():
    cls = make_hookable()
    out = Output()
    add_hook(MyEvents.CREATE, cls, out.callback)

    class Child(cls):
        pass

    assert get_callbacks(MyEvents.CREATE, Child) == []
    Child()
    assert out.output == []

def test_remove_hook():
    cls = make_hookable()
    first = Output()
    second = Output()
    add_hook(MyEvents.CREATE, cls, first.callback)
    add_hook(MyEvents.CREATE, cls, second.callback)
    hook_manager.remove_hook(MyEvents.CREATE, cls, first.callback)
    assert get_callbacks(MyEvents.CREATE, cls) == [second.callback]
    hook_manager.remove_hook(MyEvents.CREATE, cls, first.callback)
    hook_manager.remove_hook(MyEvents.DELETE, cls, first.callback)
    hook_manager.remove_hook(MyEvents.CREATE, cls, second.callback)
    assert get_callbacks(MyEvents.CREATE, cls) == []
    assert MyEvents.CREATE not in hook_manager.hooks[cls]

def test_registration_dies_with_class():
    cls = make_hookable()
    add_hook(MyEvents.CREATE, cls, Output().callback)
    gc.collect()
    count = len(hook_manager.hookables)
    del cls
    gc.collect()
    assert len(hook_manager.hookables) == count - 1
