"""
lib/fs/common/Errors.py

Purpose:
Defines the error taxonomy raised by KubeFS. Every filesystem error is an OSError carrying the errno a POSIX caller would expect, so callers can catch either our classes or the builtin ones.

Place in Architecture:
Raised by the gateway, the aggregator, the content channel and every FSOp. The command line turns them into exit codes via their errno.

Interface:

	KubeFSError(message): Base class; each subclass fixes its errno.
	NoSuchFile, FileAlreadyExists, NotDirectory, IsDirectory, DirectoryNotEmpty,
	CapacityExceeded, AmbiguousObject, CompoundFailure, AccessDenied,
	RemoteIOError, StaleObject.
	ConfigError: Invalid configuration values (a ValueError, not an OSError).

TODOs/FIXMEs:
None.
"""

import errno


class KubeFSError(OSError):
	code = errno.EIO

	def __init__(this, message=""):
		super().__init__(this.code, str(message))


class NoSuchFile(KubeFSError, FileNotFoundError):
	code = errno.ENOENT

class FileAlreadyExists(KubeFSError, FileExistsError):
	code = errno.EEXIST

class NotDirectory(KubeFSError, NotADirectoryError):
	code = errno.ENOTDIR

class IsDirectory(KubeFSError, IsADirectoryError):
	code = errno.EISDIR

class DirectoryNotEmpty(KubeFSError):
	code = errno.ENOTEMPTY

class CapacityExceeded(KubeFSError):
	code = errno.EFBIG

# More than one store object claims the same path. Never retried.
class AmbiguousObject(KubeFSError):
	code = errno.EUCLEAN

# A multi-step operation failed part way. The message names every failed step.
class CompoundFailure(KubeFSError):
	code = errno.EIO

class AccessDenied(KubeFSError, PermissionError):
	code = errno.EACCES

class RemoteIOError(KubeFSError):
	code = errno.EREMOTEIO

# The object changed in the store since it was read (HTTP 409).
class StaleObject(RemoteIOError):
	pass


class ConfigError(ValueError):
	pass
