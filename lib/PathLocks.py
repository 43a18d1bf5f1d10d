"""
lib/PathLocks.py

Purpose:
Per-path mutual exclusion. Operations that replace or delete the object at a path hold that path's lock for the duration.

Place in Architecture:
Owned by the KubeFS executor. In-process locks are always taken; when a Redis client is given, a Redis lock per path is taken as well, so that several processes working in one namespace serialize too. Ancestor directories are not locked; their writes are reconciled with resourceVersions by the aggregator.

Interface:

	__init__(redis=None, timeout=30, prefix="kubefs:lock:")
	Hold(*upaths): Context manager. Locks are taken in sorted order and are re-entrant per thread.

TODOs/FIXMEs:
None.
"""

import errno
import threading
import logging
from contextlib import contextmanager

from redis.exceptions import LockError, RedisError

from .Upath import UniversalPath


class PathLocks(object):
	def __init__(this, redis=None, timeout=30, prefix="kubefs:lock:"):
		this.redis = redis
		this.timeout = timeout
		this.prefix = prefix

		# path -> [lock, number of threads holding or waiting for it]
		this.lock = threading.Lock()
		this.locks = {}

		# Per thread: path -> [depth, redis lock or None]
		this.held = threading.local()

	def _GetHeld(this):
		if (not hasattr(this.held, 'paths')):
			this.held.paths = {}
		return this.held.paths

	def _CheckOut(this, key):
		with this.lock:
			entry = this.locks.setdefault(key, [threading.Lock(), 0])
			entry[1] += 1
			return entry[0]

	# Entries are dropped once nobody holds or waits for them, so the map only covers paths in use.
	def _CheckIn(this, key):
		with this.lock:
			entry = this.locks[key]
			entry[0].release()
			entry[1] -= 1
			if (entry[1] == 0):
				del this.locks[key]

	def IsHeld(this, upath):
		return str(UniversalPath(upath)) in this._GetHeld()

	@contextmanager
	def Hold(this, *upaths):
		keys = sorted(set(str(UniversalPath(upath)) for upath in upaths))
		acquired = []
		try:
			for key in keys:
				this._Acquire(key)
				acquired.append(key)
			yield
		finally:
			for key in reversed(acquired):
				this._Release(key)

	def _Acquire(this, key):
		held = this._GetHeld()
		if (key in held):
			held[key][0] += 1
			return

		local = this._CheckOut(key)
		local.acquire()

		remote = None
		if (this.redis is not None):
			try:
				remote = this.redis.lock(this.prefix + key, timeout=this.timeout, blocking_timeout=this.timeout)
				if (not remote.acquire()):
					raise IOError(errno.ETIMEDOUT, f"timed out waiting for the lock on {key}")
			except RedisError as e:
				this._CheckIn(key)
				raise IOError(errno.EREMOTEIO, f"cannot lock {key}: {e}") from e
			except IOError:
				this._CheckIn(key)
				raise

		held[key] = [1, remote]
		logging.debug(f"Locked {key}")

	def _Release(this, key):
		held = this._GetHeld()
		held[key][0] -= 1
		if (held[key][0] > 0):
			return

		remote = held.pop(key)[1]
		try:
			if (remote is not None):
				remote.release()
		except LockError as e:
			# The lock expired while held; someone else may have it by now.
			logging.warning(f"Lost the lock on {key} before releasing it: {e}")
		finally:
			this._CheckIn(key)
			logging.debug(f"Unlocked {key}")
