# SPDX-FileCopyrightText: 2020-present The Firebird Projects <www.firebirdsql.org>
#
# SPDX-License-Identifier: MIT
#
# PROGRAM/MODULE: peekaboo
# FILE:           peekaboo/logging.py
# DESCRIPTION:    Context-based logging and trace sinks
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

"""peekaboo - Context-based logging and trace sinks

This module provides context-based logging built on top of standard `logging` module,
and the trace sink interface used by the tracing engine.

The context-based logging adds `topic` and `agent` information into `logging.LogRecord`,
and builds `logging.Logger` names from `LoggingManager.logger_fmt`, so all messages
produced by `peekaboo` end up in loggers like `peekaboo.trace` or `peekaboo.engine`.

Trace lines are not written to loggers directly. They are passed to a *trace sink*,
any object that provides the six severity operations described by `TraceSink`.
`LoggerSink` forwards them to the context logger, while the default `ConsoleSink`
prints them to standard output through its own private logger.

Note:
    The context loggers get no `logging.Handler` from this module. Output sent to them
    through `LoggerSink` becomes visible once the application configures logging, for
    example with `logging.basicConfig()`.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum, IntEnum
from typing import Any, Protocol, runtime_checkable


class FormatElement(Enum):
    """Sentinels used within `LoggingManager.logger_fmt` list."""
    TOPIC = 1

#: Sentinel representing the topic element in `LoggingManager.logger_fmt`.
TOPIC: FormatElement = FormatElement.TOPIC

class LogLevel(IntEnum):
    """Mirrors standard `logging` levels, extended with `UNKNOWN` severity.

    `UNKNOWN` is the highest severity, used for messages that must always be logged.
    """
    NOTSET = 0
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50
    UNKNOWN = 60
    FATAL = CRITICAL
    WARN = WARNING

logging.addLevelName(LogLevel.UNKNOWN, 'UNKNOWN')

@runtime_checkable
class TraceSink(Protocol):
    """Protocol describing the destination of trace lines.

    Any object that has all six methods is a valid sink (checked with `isinstance`).
    The tracing engine uses only `info`, but the sink must provide the full set.
    """
    def debug(self, message: str) -> Any:
        """Log message with DEBUG severity."""
    def info(self, message: str) -> Any:
        """Log message with INFO severity."""
    def warn(self, message: str) -> Any:
        """Log message with WARNING severity."""
    def error(self, message: str) -> Any:
        """Log message with ERROR severity."""
    def fatal(self, message: str) -> Any:
        """Log message with FATAL severity."""
    def unknown(self, message: str) -> Any:
        """Log message with UNKNOWN severity."""

class ContextLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter injecting context (`topic`, `agent`) info.

    Wraps a standard `logging.Logger`, and adds the context information into the `extra`
    dictionary, making it available as attributes on the resulting `logging.LogRecord`.

    Parameters:
        logger: The standard `logging.Logger` instance to wrap.
        topic: Context Topic name (or None).
        agent: The original agent object or string passed to `get_logger`.
        agent_name: The resolved string name for the agent.
    """
    def __init__(self, logger, topic: str | None, agent: Any, agent_name: str):
        self.agent = agent
        super().__init__(logger, {'topic': topic, 'agent': agent_name})
    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        """Merges adapter context with any `extra` passed to the logging call,
        giving precedence to keys passed in the call.
        """
        kwargs['extra'] = dict(self.extra, **kwargs['extra']) if 'extra' in kwargs else self.extra
        return msg, kwargs

class LoggingManager:
    """Logging manager.
    """
    def __init__(self):
        self._topic_map: dict[str, str] = {}
        self.__logger_fmt: list[str | FormatElement] = ['peekaboo', TOPIC]
    def reset(self) -> None:
        """Resets manager to defaults: no topic mappings and `logger_fmt` set to
        `['peekaboo', TOPIC]`.
        """
        self._topic_map.clear()
        self.__logger_fmt = ['peekaboo', TOPIC]
    @property
    def logger_fmt(self) -> list[str | FormatElement]:
        """Logger format.

        The list can contain any number of string values and at most one occurrence of
        `TOPIC`. Empty strings are removed. The `logging.Logger` name is constructed by
        joining elements of this list with dots, with `TOPIC` replaced by topic name.
        """
        return self.__logger_fmt
    @logger_fmt.setter
    def logger_fmt(self, value: list[str | FormatElement]) -> None:
        def validated(seq):
            topic_found = False
            for item in seq:
                match item:
                    case x if isinstance(x, str):
                        if x:
                            yield item
                    case FormatElement.TOPIC:
                        if topic_found:
                            raise ValueError("Only one occurence of sentinel TOPIC allowed")
                        topic_found = True
                        yield item
                    case _:
                        raise ValueError(f"Unsupported item type {type(item)}")

        self.__logger_fmt = list(validated(value))
    def _get_logger_name(self, topic: str | None) -> str:
        result = []
        for item in self.logger_fmt:
            if item is TOPIC:
                if topic:
                    result.append(topic)
            else:
                result.append(item)
        return '.'.join(result)
    def set_topic_mapping(self, topic: str, new_topic: str | None) -> None:
        """Sets or removes the mapping of a topic name to another name.

        Arguments:
            topic: Topic name.
            new_topic: New topic name, or `None` (or empty string) to remove the mapping.
        """
        if new_topic:
            self._topic_map[topic] = str(new_topic)
        else:
            self._topic_map.pop(topic, None)
    def get_topic_mapping(self, topic: str) -> str | None:
        """Returns current name mapping for topic, or `None`.
        """
        return self._topic_map.get(topic)
    def get_agent_name(self, agent: Any) -> str:
        """Returns the canonical string name for given agent identifier.

        Strings are used directly. For other objects it uses `agent._agent_name_` if
        defined, otherwise `module.ClassQualname`.
        """
        if isinstance(agent, str):
            return agent
        if not (agent_name := getattr(agent, '_agent_name_', None)):
            agent_name = f'{agent.__class__.__module__}.{agent.__class__.__qualname__}'
        return str(agent_name)
    def get_logger(self, agent: Any, topic: str | None=None) -> ContextLoggerAdapter:
        """Returns `ContextLoggerAdapter` for specified agent and topic.

        Arguments:
            agent: The agent identifier (object or string).
            topic: Optional topic name, subject to topic mapping.
        """
        agent_name = self.get_agent_name(agent)
        topic = self._topic_map.get(topic, topic)
        logger = logging.getLogger(self._get_logger_name(topic))
        return ContextLoggerAdapter(logger, topic, agent, agent_name)

class LoggerSink:
    """Trace sink that forwards messages to the context logger.

    Arguments:
        agent: Agent identification passed to `get_logger`.
        topic: Logging topic (default: 'trace').

    The logger is looked up for each message, so changes in `logging_manager`
    configuration apply immediately.
    """
    def __init__(self, agent: Any='peekaboo', topic: str='trace'):
        #: Agent identification
        self.agent: Any = agent
        #: Logging topic
        self.topic: str = topic
    def _log(self, level: LogLevel, message: str) -> None:
        logging_manager.get_logger(self.agent, self.topic).log(level, message)
    def debug(self, message: str) -> None:
        "Log message with DEBUG severity."
        self._log(LogLevel.DEBUG, message)
    def info(self, message: str) -> None:
        "Log message with INFO severity."
        self._log(LogLevel.INFO, message)
    def warn(self, message: str) -> None:
        "Log message with WARNING severity."
        self._log(LogLevel.WARNING, message)
    def error(self, message: str) -> None:
        "Log message with ERROR severity."
        self._log(LogLevel.ERROR, message)
    def fatal(self, message: str) -> None:
        "Log message with CRITICAL severity."
        self._log(LogLevel.FATAL, message)
    def unknown(self, message: str) -> None:
        "Log message with UNKNOWN severity."
        self._log(LogLevel.UNKNOWN, message)

class ConsoleSink(LoggerSink):
    """Trace sink that prints messages to the console.

    Arguments:
        agent: Agent identification stored in log records.
        topic: Logging topic (default: 'trace').
        stream: Output stream. `sys.stdout` when not specified.

    Messages are written verbatim, one per line, at every severity. The sink owns
    a private logger that is not registered in the logging hierarchy and does not
    propagate, so host logging configuration neither hides nor duplicates them.
    """
    def __init__(self, agent: Any='peekaboo', topic: str='trace', *, stream=None):
        super().__init__(agent, topic)
        handler = logging.StreamHandler(sys.stdout if stream is None else stream)
        handler.setFormatter(logging.Formatter('%(message)s'))
        logger = logging.Logger(f'peekaboo.{topic}', LogLevel.DEBUG)
        logger.propagate = False
        logger.addHandler(handler)
        #: Logger adapter used for output
        self.logger: ContextLoggerAdapter = ContextLoggerAdapter(logger, topic, agent,
                                                                 logging_manager.get_agent_name(agent))
    def _log(self, level: LogLevel, message: str) -> None:
        self.logger.log(level, message)

#: Context logging manager.
logging_manager: LoggingManager = LoggingManager()
#: Shortcut to global `.LoggingManager.get_logger` function.
get_logger = logging_manager.get_logger
