import sys
import time
import inspect
from enum import Enum
from typing import Any, Callable, NamedTuple, TextIO, TypeAlias
from contextvars import ContextVar
from ..config import LOG_LEVEL
from .term import Term

# NOTE: When `None`, entries go to whatever `sys.stderr` is at the time of
# writing, which keeps the output capturable.
ERR: TextIO | None = None


LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="emitter")

TPrimitive: TypeAlias = bool | int | float | str | bytes | None


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30  # A Warning
	Error = 40  # A managed error
	Exception = 50  # An un-managed error


LOG_LEVEL_COLOR = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}


class LogEntry(NamedTuple):
	origin: str
	time: float
	level: LogLevel = LogLevel.Info
	message: str | None = None
	value: TPrimitive | None = None
	context: dict[str, TPrimitive] | None = None
	icon: str | None = None
	stack: list[str] | None = None


TStack: TypeAlias = list[str]


def setErrorStream(stream: TextIO | None) -> TextIO | None:
	global ERR
	ERR = stream
	return ERR


def errorStream() -> TextIO:
	return sys.stderr if ERR is None else ERR


def setLevel(level: LogLevel | str) -> LogLevel:
	"""Sets the minimum level of the entries that are sent."""
	global LEVEL
	LEVEL = level if isinstance(level, LogLevel) else LogLevel[level]
	return LEVEL


def _configuredLevel() -> LogLevel:
	try:
		return LogLevel[LOG_LEVEL]
	except KeyError:
		return LogLevel.Info


LEVEL: LogLevel = _configuredLevel()


def callstack(offset: int = 1) -> list[str]:
	"""
	Returns a list of function/method names on the call stack.
	For methods, the class name is included as 'ClassName.methodName'.
	"""
	return [
		(
			f"{_.frame.f_locals['self'].__class__.__qualname__}.{_.function}"
			if "self" in _.frame.f_locals
			else _.function
		).replace("<lambda>", "λ")
		for _ in reversed(inspect.stack()[offset:])
	]


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.NORMAL}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	if entry.level.value < LEVEL.value:
		return entry
	stream = errorStream()
	icon: str = f" {entry.icon}" if entry.icon else ""
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	code: str = f" [{entry.value}]" if entry.value is not None else ""
	stream.write(
		f"{clr}{Term.BOLD}[{entry.origin}]{Term.RESET}{icon} {entry.message}{code} {formatData(entry.context)}{Term.RESET}\n"
	)
	if entry.stack:
		stream.write(
			f"{clr}{Term.Color(38)}  {' ' * len(entry.origin)} {'→'.join(entry.stack)}{Term.RESET}\n"
		)
	stream.flush()
	return entry


def entry(
	*,
	origin: str | None = None,
	at: float | None = None,
	level: LogLevel = LogLevel.Info,
	message: str | None = None,
	value: TPrimitive | None = None,
	context: dict[str, TPrimitive],
	icon: str | None = None,
	stack: TStack | bool | None = None,
) -> LogEntry:
	return LogEntry(
		origin=origin or LogOrigin.get(),
		time=time.time() if at is None else at,
		level=level,
		message=message,
		value=value,
		context=context,
		icon=icon,
		stack=callstack(2) if stack is True else stack if stack else None,
	)


def debug(
	message: str,
	*,
	origin: str | None = None,
	icon: str | None = None,
	stack: TStack | bool | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			level=LogLevel.Debug,
			origin=origin,
			context=context,
			icon=icon,
			stack=callstack(2) if stack is True else stack if stack else None,
		)
	)


def info(
	message: str,
	*,
	origin: str | None = None,
	icon: str | None = None,
	stack: TStack | bool | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			origin=origin,
			context=context,
			icon=icon,
			stack=callstack(2) if stack is True else stack if stack else None,
		)
	)


def warning(
	message: str,
	*,
	origin: str | None = None,
	icon: str | None = None,
	stack: TStack | bool | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			level=LogLevel.Warning,
			origin=origin,
			context=context,
			icon=icon,
			stack=callstack(2) if stack is True else stack if stack else None,
		)
	)


def error(
	message: str,
	code: int | str | None,
	*,
	origin: str | None = None,
	icon: str | None = None,
	stack: TStack | bool | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			value=code,
			level=LogLevel.Error,
			origin=origin,
			context=context,
			icon=icon,
			stack=callstack(2) if stack is True else stack if stack else None,
		)
	)


def exception(
	exception: BaseException,
	message: str | None = None,
) -> BaseException:
	try:
		stream = errorStream()
		stream.write(
			f"!!! EXCP {f'{message}: [{exception.__class__.__name__}] {exception}' if message else f'[{exception.__class__.__name__}] {exception}'}\n"
		)
		tb = exception.__traceback__
		while tb:
			code = tb.tb_frame.f_code
			stream.write(
				f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n",
			)
			tb = tb.tb_next
		stream.flush()
	except Exception:  # nosec: B110
		# Swallow all exceptions so that this function can be called from an exception
		# handler safely, such as in the implementation of logging/logging sinks.
		pass

	# Return the exception so that this function can be called like:
	#   raise exception(e)
	return exception


LOGGER_LEVEL: dict[Callable[..., Any], LogLevel] = {
	debug: LogLevel.Debug,
	info: LogLevel.Info,
	warning: LogLevel.Warning,
	error: LogLevel.Error,
	exception: LogLevel.Exception,
}


def logged(item: Callable[..., Any]) -> bool:
	"""Takes one of the logging function, and tells if it is currently
	supported. This is used to guard against running the whole entry
	building when not necessary."""
	return LOGGER_LEVEL.get(item, LogLevel.Info).value >= LEVEL.value


# EOF
