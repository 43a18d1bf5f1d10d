"""
lib/fs/Channel.py

Purpose:
Implements the content channel: a bounded, in-memory, random-access byte buffer bound to one path. It stands in for a streaming file handle.

Place in Architecture:
Returned by the Open FSOp. Loads a file's content when opened and, for writable channels, persists the whole buffer when closed, after the aggregator has brought the parent chain up to date. The store is not touched in between, so other readers never see a half-written file.

Interface:

	__init__(executor, upath, mode='r', capacity=None): Opens the channel.
	read(size=-1), write(data), seek(offset, whence=0), tell(), truncate(size=None), size()
	readable(), writable(), seekable(), flush()
	close(): Persists (if writable) and releases the buffer. Idempotent.
	discard(): Releases the buffer without persisting.
	Context manager: persists on normal exit, discards when the block raised.

TODOs/FIXMEs:
None.
"""

import io
import errno
import threading
import logging

from .Object import *
from .common.Errors import *
from ..Upath import UniversalPath


class ContentChannel(object):
	"""
	Logical file handle. Each channel owns its own buffer; two channels on
	the same path do not see each other's writes and the last to close wins.
	"""

	def __init__(this, executor, upath, mode='r', capacity=None):
		this.executor = executor
		this.upath = UniversalPath(upath)
		this.mode = mode
		this.capacity = capacity if capacity is not None else executor.max_file_size
		this.lock = threading.RLock()
		this.position = 0
		this.buffer = None

		flags = set(mode.replace('b', '').replace('t', ''))
		if (len(flags & set('rwax')) != 1 or not flags <= set('rwax+')):
			raise ValueError(f"invalid mode: {mode!r}")

		this.writeable = bool(flags & set('wax+'))
		this.readable_ = 'r' in flags or '+' in flags
		this.append = 'a' in flags

		existing = executor.GetFsObject(this.upath)
		if (existing is not None and IsDir(existing)):
			raise IsDirectory(f"{this.upath} is a directory")
		if (existing is not None and not IsFile(existing)):
			raise IOError(errno.EINVAL, f"{this.upath} is not a regular file")
		if (existing is None and 'r' in flags):
			raise NoSuchFile(str(this.upath))
		if (existing is not None and 'x' in flags):
			raise FileAlreadyExists(str(this.upath))

		if (existing is None or 'w' in flags):
			content = b""
		else:
			content = ContentBytes(existing)

		if (len(content) > this.capacity):
			raise CapacityExceeded(f"{this.upath} holds {len(content)} bytes; channel capacity is {this.capacity}")

		this.buffer = bytearray(content)
		if (this.append):
			this.position = len(this.buffer)

	def __enter__(this):
		return this

	def __exit__(this, exc_type, exc_value, traceback):
		if (exc_type is None):
			this.close()
		else:
			this.discard()

	@property
	def closed(this):
		return this.buffer is None

	def _check_open(this):
		if (this.buffer is None):
			raise IOError(errno.EBADF, "Operation on a closed file")

	def readable(this):
		return this.readable_

	def writable(this):
		return this.writeable

	def seekable(this):
		return True

	def size(this):
		with this.lock:
			this._check_open()
			return len(this.buffer)

	def tell(this):
		with this.lock:
			this._check_open()
			return this.position

	def seek(this, offset, whence=io.SEEK_SET):
		with this.lock:
			this._check_open()
			if (whence == io.SEEK_SET):
				position = offset
			elif (whence == io.SEEK_CUR):
				position = this.position + offset
			elif (whence == io.SEEK_END):
				position = len(this.buffer) + offset
			else:
				raise ValueError(f"invalid whence ({whence})")

			if (position < 0):
				raise IOError(errno.EINVAL, "negative seek position")
			this.position = position
			return this.position

	def read(this, size=-1):
		with this.lock:
			this._check_open()
			if (not this.readable_):
				raise IOError(errno.EBADF, "File not readable")

			if (size is None or size < 0):
				end = len(this.buffer)
			else:
				end = min(len(this.buffer), this.position + size)
			if (this.position >= end):
				return b""

			ret = bytes(this.buffer[this.position:end])
			this.position = end
			return ret

	def write(this, data):
		with this.lock:
			this._check_open()
			if (not this.writeable):
				raise IOError(errno.EBADF, "File not writeable")

			data = bytes(data)
			if (this.append):
				this.position = len(this.buffer)

			end = this.position + len(data)
			if (end > this.capacity):
				raise CapacityExceeded(f"Writing {len(data)} bytes at {this.position} exceeds the capacity of {this.capacity} bytes for {this.upath}")

			# Writing past the end fills the gap with zeros.
			if (this.position > len(this.buffer)):
				this.buffer.extend(b"\x00" * (this.position - len(this.buffer)))

			this.buffer[this.position:end] = data
			this.position = end
			return len(data)

	def truncate(this, size=None):
		with this.lock:
			this._check_open()
			if (not this.writeable):
				raise IOError(errno.EBADF, "File not writeable")

			if (size is None):
				size = this.position
			if (size < 0):
				raise IOError(errno.EINVAL, "negative size")
			if (size > this.capacity):
				raise CapacityExceeded(f"Cannot grow {this.upath} to {size} bytes; capacity is {this.capacity}")

			if (size < len(this.buffer)):
				del this.buffer[size:]
			else:
				this.buffer.extend(b"\x00" * (size - len(this.buffer)))
			return size

	def flush(this):
		with this.lock:
			this._check_open()

	def close(this):
		with this.lock:
			if (this.buffer is None):
				return
			try:
				if (this.writeable):
					this.executor.StoreFile(this.upath, bytes(this.buffer))
			finally:
				this.buffer = None

	def discard(this):
		with this.lock:
			if (this.buffer is not None):
				logging.debug(f"Discarding unsaved content of {this.upath}")
			this.buffer = None
