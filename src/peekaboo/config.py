# SPDX-FileCopyrightText: 2020-present The Firebird Projects <www.firebirdsql.org>
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: peekaboo
# FILE:           peekaboo/config.py
# DESCRIPTION:    Classes for configuration definitions
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

"""peekaboo - Classes for configuration definitions

Complex applications (and some library modules like `peekaboo.trace`) need
configuration that could be stored in files and passed between processes. This module
provides a framework for definition of typed configuration options, grouped into
`Config` sections, that could be loaded from `~configparser.ConfigParser` instances, and
serialized to/from `google.protobuf.struct_pb2.Struct` messages.

Example::

    class WorkerConfig(Config):
        '''Worker configuration'''
        def __init__(self, name: str):
            super().__init__(name)
            self.task: StrOption = StrOption('task', "Task name", required=True)
            self.tags: ListOption = ListOption('tags', "Task tags")

    class AppConfig(Config):
        '''Application configuration'''
        def __init__(self):
            super().__init__('app')
            self.debug: BoolOption = BoolOption('debug', "Debug mode", default=False)
            self.workers: ConfigListOption = \\
                ConfigListOption('workers', WorkerConfig, "Worker sections")
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from configparser import DEFAULTSECT, ConfigParser
from typing import Generic, TypeVar

from google.protobuf.struct_pb2 import ListValue, Struct

from .types import Error

T = TypeVar("T")

#: Valid string literals for True value.
TRUE_STR: list[str] = ['yes', 'true', 'on', 'y', '1']
#: Valid string literals for False value.
FALSE_STR: list[str] = ['no', 'false', 'off', 'n', '0']

def str2bool(value: str) -> bool:
    """Converts string to bool using `TRUE_STR` and `FALSE_STR` literals (case-insensitive).

    Raises:
        ValueError: When value is not a valid bool string constant.
    """
    if (v := value.strip().lower()) in TRUE_STR:
        return True
    if v not in FALSE_STR:
        raise ValueError("Value is not a valid bool string constant")
    return False

class Option(Generic[T], ABC):
    """Generic abstract base class for configuration options.

    Arguments:
        name: Option name.
        datatype: Option datatype.
        description: Option description. Can span multiple lines.
        required: True if option must have a value.
        default: Default option value.
    """
    def __init__(self, name: str, datatype: type[T], description: str, *, required: bool=False,
                 default: T | None=None):
        assert name and isinstance(name, str), "name required" # noqa: S101
        assert description and isinstance(description, str), "description required" # noqa: S101
        #: Option name.
        self.name: str = name
        #: Option datatype.
        self.datatype: type[T] = datatype
        #: Option description. Can span multiple lines.
        self.description: str = description
        #: True if option must have a value.
        self.required: bool = required
        #: Default option value.
        self.default: T | None = default
        if default is not None:
            self.set_value(default)
    def _check_value(self, value: T | None) -> None:
        if value is None and self.required:
            raise ValueError(f"Value is required for option '{self.name}'.")
        if value is not None and not isinstance(value, self.datatype):
            raise TypeError(f"Option '{self.name}' value must be a "
                            f"'{self.datatype.__name__}',"
                            f" not '{type(value).__name__}'")
    def load_config(self, config: ConfigParser, section: str) -> None:
        """Update option value from `~configparser.ConfigParser` instance.

        Arguments:
            config:  ConfigParser instance.
            section: Name of ConfigParser section that should be used to get new option value.

        Raises:
            ValueError: When option value cannot be loadded.
            KeyError: If section does not exists, and it's not `configparser.DEFAULTSECT`.
        """
        if not config.has_section(section) and section != DEFAULTSECT:
            raise KeyError(f"Configuration error: section '{section}' not found!")
        if config.has_option(section, self.name):
            self.set_as_str(config[section][self.name])
    def load_proto(self, proto: Struct) -> None:
        """Deserialize value from `Struct` message.

        Arguments:
            proto: Protobuf message that may contain this option's value under `self.name`.

        Raises:
            TypeError: If the protobuf value type is incompatible with the option.
        """
        if self.name in proto:
            self._set_from_proto(proto[self.name])
    def save_proto(self, proto: Struct) -> None:
        """Serialize the current value into `Struct` message under `self.name`.

        Nothing is stored when current value is `None`.
        """
        if (value := self.get_value()) is not None:
            proto[self.name] = value
    def _set_from_proto(self, value) -> None:
        if isinstance(value, str):
            self.set_as_str(value)
        else:
            raise TypeError(f"Wrong value type: {type(value).__name__}")
    def validate(self) -> None:
        """Validates option state.

        Raises:
            Error: When required option does not have a value.
        """
        if self.required and self.get_value() is None:
            raise Error(f"Missing value for required option '{self.name}'")
    def has_value(self) -> bool:
        """Returns True if option value is not None.
        """
        return self.get_value() is not None
    def clear(self, *, to_default: bool=True) -> None:
        """Clears the option value.

        Arguments:
            to_default: If True, sets the option value to default value, else to None.
        """
        self.set_value(self.default if to_default else None)
    @abstractmethod
    def set_as_str(self, value: str) -> None:
        """Set new option value from string.

        Raises:
            ValueError: When the argument is not a valid option value.
        """
    @abstractmethod
    def get_value(self) -> T | None:
        """Returns current option value.
        """
    @abstractmethod
    def set_value(self, value: T | None) -> None:
        """Set new option value.

        Raises:
            TypeError: When the new value is not of the expected `datatype`.
        """

class Config:
    """Collection of configuration options, potentially nested.

    Arguments:
        name: Name associated with Config (default section name).
        optional: Whether config is optional (True) or mandatory (False) for
                  configuration file (see `.load_config()` for details).
        description: Optional configuration description. Can span multiple lines.

    Important:
        Descendants must define individual options and sub configs as instance attributes.
    """
    def __init__(self, name: str, *, optional: bool=False, description: str | None=None):
        self._name: str = name
        self._optional: bool = optional
        self._description: str | None = description if description is not None else self.__doc__
    def __setattr__(self, name, value) -> None:
        for attr in vars(self).values():
            if isinstance(attr, Option) and attr.name == name:
                raise ValueError("Cannot assign values to option itself, use 'option.value' instead")
        super().__setattr__(name, value)
    def validate(self) -> None:
        """Recursively validates all owned options and sub-configs.

        Raises:
            Error: When any validation constraint is violated.
        """
        for option in self.options:
            option.validate()
        for config in self.configs:
            config.validate()
    def clear(self, *, to_default: bool=True) -> None:
        """Clears all owned options and options in owned sub-configs.
        """
        for option in self.options:
            option.clear(to_default=to_default)
        for config in self.configs:
            config.clear(to_default=to_default)
    def get_description(self) -> str:
        """Configuration description. Class doc string if not provided on creation.
        """
        return '' if self._description is None else self._description
    def load_config(self, config: ConfigParser, section: str | None=None) -> None:
        """Update configuration values from a `ConfigParser` instance.

        Arguments:
            config:  `ConfigParser` instance containing configuration values.
            section: Name of the section corresponding to this `Config`. If `None`,
                     uses `self.name`.

        Raises:
            Error: If `section` does not exist and `self.optional` is `False`, or when
                   option value cannot be parsed.
        """
        if section is None:
            section = self.name
        if not config.has_section(section):
            if self._optional:
                return
            if section != DEFAULTSECT:
                raise Error(f"Configuration error: section '{section}' not found!")
        try:
            for option in self.options:
                option.load_config(config, section)
            for subcfg in self.configs:
                subcfg.load_config(config)
        except Error:
            raise
        except Exception as exc:
            raise Error(f"Configuration error: {exc}") from exc
    def load_proto(self, proto: Struct) -> None:
        """Deserialize values from `Struct` message.

        Sub-configs are read from nested `Struct` values stored under their names.
        """
        for option in self.options:
            option.load_proto(proto)
        for subcfg in self.configs:
            if subcfg.name in proto:
                subcfg.load_proto(proto[subcfg.name])
    def save_proto(self, proto: Struct) -> None:
        """Serialize values into `Struct` message.

        Sub-configs are stored as nested `Struct` values under their names.
        """
        for option in self.options:
            option.save_proto(proto)
        for subcfg in self.configs:
            subcfg.save_proto(proto.get_or_create_struct(subcfg.name))
    @property
    def name(self) -> str:
        """Name associated with Config (default section name).
        """
        return self._name
    @property
    def optional(self) -> bool:
        """Whether config is optional (True) or mandatory (False).
        """
        return self._optional
    @property
    def options(self) -> list[Option]:
        """List of `Option` instances directly defined as attributes of this `Config` instance."""
        return [v for v in vars(self).values() if isinstance(v, Option)]
    @property
    def configs(self) -> list[Config]:
        """List of nested `Config` instances, including those held by `ConfigListOption`."""
        result = [v for v in vars(self).values() if isinstance(v, Config)]
        for opt in (v for v in vars(self).values() if isinstance(v, ConfigListOption)):
            result.extend(opt.value)
        return result

# Options
class StrOption(Option[str]):
    """Configuration option with string value.

    Arguments:
        name: Option name.
        description: Option description. Can span multiple lines.
        required: True if option must have a value.
        default: Default option value.
    """
    def __init__(self, name: str, description: str, *, required: bool=False, default: str | None=None):
        self._value: str | None = None
        super().__init__(name, str, description, required=required, default=default)
    def set_as_str(self, value: str) -> None:
        """Set new option value from string.
        """
        self._value = value.strip()
    def get_value(self) -> str | None:
        """Returns current option value.
        """
        return self._value
    def set_value(self, value: str | None) -> None:
        """Set new option value.
        """
        self._check_value(value)
        self._value = value
    value: str | None = property(get_value, set_value, doc="Current option value")

class BoolOption(Option[bool]):
    """Configuration option with boolean value.

    Arguments:
        name: Option name.
        description: Option description. Can span multiple lines.
        required: True if option must have a value.
        default: Default option value.
    """
    def __init__(self, name: str, description: str, *, required: bool=False,
                 default: bool | None=None):
        self._value: bool | None = None
        super().__init__(name, bool, description, required=required, default=default)
    def _set_from_proto(self, value) -> None:
        if isinstance(value, bool):
            self.set_value(value)
        else:
            super()._set_from_proto(value)
    def set_as_str(self, value: str) -> None:
        """Set new option value from string.

        Raises:
            ValueError: When the argument is not a valid bool string constant.
        """
        self._value = str2bool(value)
    def get_value(self) -> bool | None:
        """Returns current option value.
        """
        return self._value
    def set_value(self, value: bool | None) -> None:
        """Set new option value.
        """
        self._check_value(value)
        self._value = value
    value: bool | None = property(get_value, set_value, doc="Current option value")

class ListOption(Option[list]):
    """Configuration option with list of string values.

    Arguments:
        name:        Option name.
        description: Option description. Can span multiple lines.
        required:    True if option must have a value.
        default:     Default option value.
        separator:   String that separates list item values when options value is read
                     from `ConfigParser`. If separator is `None` [default] and the value
                     contains line breaks, it uses the line break as separator, otherwise
                     it uses comma as separator.

    Important:
        When option is read from `ConfigParser`, empty values are ignored.
    """
    def __init__(self, name: str, description: str, *, required: bool=False,
                 default: list | None=None, separator: str | None=None):
        self._value: list | None = None
        #: String that separates list item values in configuration files.
        self.separator: str | None = separator
        super().__init__(name, list, description, required=required,
                         default=None if default is None else list(default))
    def _check_value(self, value: list | None) -> None:
        super()._check_value(value)
        if value is not None:
            for i, item in enumerate(value):
                if not isinstance(item, str):
                    raise ValueError(f"List item[{i}] has wrong type")
    def _split(self, value: str) -> list[str]:
        separator = ('\n' if '\n' in value else ',') if self.separator is None else self.separator
        return [i.strip() for i in value.split(separator) if i.strip()]
    def _set_from_proto(self, value) -> None:
        if isinstance(value, ListValue):
            self.set_value(list(value.items()))
        else:
            super()._set_from_proto(value)
    def clear(self, *, to_default: bool=True) -> None:
        """Clears the option value.
        """
        self._value = list(self.default) if to_default and self.default is not None else None
    def set_as_str(self, value: str) -> None:
        """Set new option value from string.
        """
        self._value = self._split(value)
    def get_value(self) -> list | None:
        """Returns current option value.
        """
        return self._value
    def set_value(self, value: list | None) -> None:
        """Set new option value.

        Raises:
            TypeError: When the new value is not a list.
            ValueError: When list item is not a string.
        """
        self._check_value(value)
        self._value = None if value is None else list(value)
    value: list | None = property(get_value, set_value, doc="Current option value")

class ConfigListOption(Option[list]):
    """Option holding a list of `Config` instances, stored as list of their section names.

    When the list of names is loaded, new instances of `item_type` are created for each
    name. Loading the *contents* of referenced sections is handled by the parent
    `Config`.

    Arguments:
        name: Option name.
        item_type: The `Config` subclass for items in the list.
        description: Option description. Can span multiple lines.
        required: If True, the list of section names cannot be empty.
        separator: String separating section names in the config file value.
    """
    def __init__(self, name: str, item_type: type[Config], description: str, *,
                 required: bool=False, separator: str | None=None):
        assert issubclass(item_type, Config) # noqa: S101
        self._value: list = []
        #: Datatype of list items.
        self.item_type: type[Config] = item_type
        #: String that separates section names in configuration files.
        self.separator: str | None = separator
        super().__init__(name, list, description, required=required, default=[])
    def _check_value(self, value: list) -> None:
        super()._check_value(value)
        if value is not None:
            for i, item in enumerate(value):
                if not isinstance(item, self.item_type):
                    raise ValueError(f"List item[{i}] has wrong type: "
                                     f"Expected '{self.item_type.__name__}', "
                                     f"got '{type(item).__name__}'")
    def _set_from_proto(self, value) -> None:
        if isinstance(value, ListValue):
            self._value = [self.item_type(name) for name in value.items()]
        else:
            super()._set_from_proto(value)
    def validate(self) -> None:
        """Validates option state.

        Raises:
            Error: When required option does not have a value.
        """
        if self.required and not self._value:
            raise Error(f"Missing value for required option '{self.name}'")
    def clear(self, *, to_default: bool=True) -> None: # noqa: ARG002
        """Clears the list of sub-configs.
        """
        self._value = []
    def set_as_str(self, value: str) -> None:
        """Set new option value from string with section names.
        """
        separator = ('\n' if '\n' in value else ',') if self.separator is None else self.separator
        self._value = [self.item_type(name.strip()) for name in value.split(separator)
                       if name.strip()]
    def save_proto(self, proto: Struct) -> None:
        """Serialize list of section names into `Struct` message.
        """
        if self._value:
            proto[self.name] = [cfg.name for cfg in self._value]
    def get_value(self) -> list:
        """Returns current option value.
        """
        return self._value
    def set_value(self, value: list | None) -> None:
        """Set new option value.
        """
        self._check_value(value)
        self._value = [] if value is None else list(value)
    value: list = property(get_value, set_value, doc="Current option value")
