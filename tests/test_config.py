# SPDX-FileCopyrightText: 2020-present The Firebird Projects <www.firebirdsql.org>
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: peekaboo
# FILE:           tests/test_config.py
# DESCRIPTION:    Tests for peekaboo.config
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

"""Unit tests for the peekaboo.config module."""

from __future__ import annotations

from configparser import ConfigParser

import pytest
from google.protobuf.struct_pb2 import Struct

from peekaboo.config import (
    BoolOption,
    Config,
    ConfigListOption,
    ListOption,
    StrOption,
    str2bool,
)
from peekaboo.trace import TraceConfig
from peekaboo.types import Error

# --- Test Setup & Fixtures ---

class WorkerConfig(Config):
    """Worker configuration"""
    def __init__(self, name: str):
        super().__init__(name)
        self.task: StrOption = StrOption('task', "Task name", required=True)
        self.tags: ListOption = ListOption('tags', "Task tags")

class AppConfig(Config):
    """Application configuration"""
    def __init__(self):
        super().__init__('app')
        self.title: StrOption = StrOption('title', "Title", default='untitled')
        self.debug: BoolOption = BoolOption('debug', "Debug mode", default=False)
        self.paths: ListOption = ListOption('paths', "Paths", default=['/tmp'])
        self.workers: ConfigListOption = \
            ConfigListOption('workers', WorkerConfig, "Worker sections")

APP_CONFIG = """
[app]
title = Sample
debug = on
paths = /usr, /opt
workers = first, second

[first]
task = import
tags =
    alpha
    beta

[second]
task = export
"""

@pytest.fixture
def parser():
    result = ConfigParser()
    result.read_string(APP_CONFIG)
    return result

# --- Test Functions ---

def test_str2bool():
    assert str2bool('Yes')
    assert str2bool(' on ')
    assert not str2bool('OFF')
    assert not str2bool('0')
    with pytest.raises(ValueError):
        str2bool('maybe')

def test_defaults():
    cfg = AppConfig()
    assert cfg.name == 'app'
    assert not cfg.optional
    assert cfg.get_description() == "Application configuration"
    assert cfg.title.value == 'untitled'
    assert cfg.debug.value is False
    assert cfg.paths.value == ['/tmp']
    assert cfg.workers.value == []
    assert [opt.name for opt in cfg.options] == ['title', 'debug', 'paths', 'workers']
    assert cfg.configs == []

def test_option_values():
    cfg = AppConfig()
    cfg.title.value = 'new'
    assert cfg.title.value == 'new'
    with pytest.raises(TypeError):
        cfg.title.value = 1
    with pytest.raises(ValueError):
        cfg.paths.value = ['/usr', 1]
    with pytest.raises(ValueError):
        cfg.workers.value = [AppConfig()]
    with pytest.raises(ValueError, match="Cannot assign values to option itself"):
        cfg.title = 'other'
    cfg.paths.value.append('/var')
    cfg.clear()
    assert cfg.title.value == 'untitled'
    assert cfg.paths.value == ['/tmp']
    cfg.clear(to_default=False)
    assert cfg.title.value is None
    assert not cfg.debug.has_value()

def test_load_config(parser):
    cfg = AppConfig()
    cfg.load_config(parser)
    assert cfg.title.value == 'Sample'
    assert cfg.debug.value is True
    assert cfg.paths.value == ['/usr', '/opt']
    assert [w.name for w in cfg.workers.value] == ['first', 'second']
    first, second = cfg.workers.value
    assert first.task.value == 'import'
    assert first.tags.value == ['alpha', 'beta']
    assert second.task.value == 'export'
    assert second.tags.value is None
    assert cfg.configs == [first, second]
    cfg.validate()

def test_load_config_errors(parser):
    cfg = AppConfig()
    with pytest.raises(Error, match="section 'missing' not found"):
        cfg.load_config(parser, 'missing')
    parser['app']['debug'] = 'maybe'
    with pytest.raises(Error, match="Configuration error: Value is not a valid bool"):
        cfg.load_config(parser)
    parser['app']['debug'] = 'no'
    del parser['second']['task']
    cfg = AppConfig()
    cfg.load_config(parser)
    with pytest.raises(Error, match="Missing value for required option 'task'"):
        cfg.validate()

def test_optional_config():
    class OptionalConfig(Config):
        def __init__(self):
            super().__init__('optional', optional=True, description="Optional section")
            self.value: StrOption = StrOption('value', "Value", default='x')

    cfg = OptionalConfig()
    cfg.load_config(ConfigParser())
    assert cfg.value.value == 'x'
    assert cfg.get_description() == "Optional section"

def test_proto(parser):
    cfg = AppConfig()
    cfg.load_config(parser)
    proto = Struct()
    cfg.save_proto(proto)
    assert proto['title'] == 'Sample'
    assert proto['debug'] is True
    assert list(proto['workers'].items()) == ['first', 'second']
    assert proto['first']['task'] == 'import'
    assert 'tags' not in proto['second']
    #
    restored = AppConfig()
    restored.load_proto(proto)
    assert restored.title.value == 'Sample'
    assert restored.debug.value is True
    assert restored.paths.value == ['/usr', '/opt']
    first, second = restored.workers.value
    assert (first.name, first.task.value, first.tags.value) == ('first', 'import', ['alpha', 'beta'])
    assert (second.name, second.task.value, second.tags.value) == ('second', 'export', None)

def test_proto_wrong_type():
    proto = Struct()
    proto.update({'title': 10})
    with pytest.raises(TypeError, match="Wrong value type"):
        AppConfig().load_proto(proto)

def test_trace_config(parser):
    parser.read_string("""
[peekaboo]
sink = mypkg.sinks:Sink
auto_grant = mypkg.models:Model, mypkg.models:Entity
autogrant = off
classes = orders

[orders]
source = mypkg.orders:Order
instance_methods = submit, cancel
type_methods = create
""")
    cfg = TraceConfig('peekaboo')
    cfg.load_config(parser)
    cfg.validate()
    assert cfg.sink.value == 'mypkg.sinks:Sink'
    assert cfg.auto_grant.value == ['mypkg.models:Model', 'mypkg.models:Entity']
    assert cfg.autogrant.value is False
    orders = cfg.classes.value[0]
    assert orders.source.value == 'mypkg.orders:Order'
    assert orders.instance_methods.value == ['submit', 'cancel']
    assert orders.type_methods.value == ['create']
