"""
lib/fs/Aggregator.py

Purpose:
Keeps directory objects consistent with their descendants. A directory's data map lists its children with their sizes, and its size label is the sum of that map. Whenever a descendant is created, resized or removed, every ancestor up to root is rewritten.

Place in Architecture:
The only code that creates or resizes DIR and ROOT objects, and the single create-or-replace routine for FILE objects too (WriteObject). Used by the content channel on close and by the Make, Copy, Move and Unlink FSOps.

Interface:

	__init__(executor)
	EnsureAncestryAndSize(upath, selfSize): Upserts upath's entry in its parent, recursively. RETURNS the parent object (None for root).
	RemoveFromParent(upath): Drops upath's entry from its parent and re-sums the chain. RETURNS the parent object or None.
	WriteObject(upath, parent, data, objectType, size=None, annotations=None): Creates or replaces the object at upath.
	StoreObject(upath, existing, parent, data, objectType, size=None, annotations=None): One unretried write attempt.
	Backoff(upath, attempt, err): Sleeps before the next attempt, or re-raises err once the retries are spent.

TODOs/FIXMEs:
None.
"""

import time
import logging

from .Labels import *
from .Object import *
from .common.Errors import *
from .common.ObjectTypes import ObjectType
from ..Upath import UniversalPath
from ..Utils import ExponentialSleep


# The chain walk is NOT transactional: each level is a separate store call.
# If a write fails part way, the levels already written stay written; the caller sees the error.
# Concurrent writers are reconciled per object with resourceVersions: a conflicting write re-reads and tries again.
class DirectoryAggregator(object):
	def __init__(this, executor):
		this.executor = executor

	@property
	def retries(this):
		return this.executor.conflict_retries

	def EnsureAncestryAndSize(this, upath, selfSize):
		upath = UniversalPath(upath)
		if (upath.IsRoot()):
			return None

		parentPath = upath.GetParent()
		name = upath.GetName()

		for attempt in range(this.retries + 1):
			existing = this._GetDirectory(parentPath)
			entries = GetDirectoryEntries(existing) if existing is not None else {}
			entries[name] = int(selfSize)

			grandparent = this.EnsureAncestryAndSize(parentPath, sum(entries.values()))
			try:
				return this._WriteDirectory(parentPath, existing, grandparent, entries)
			except StaleObject as e:
				this.Backoff(parentPath, attempt, e)

	def RemoveFromParent(this, upath):
		upath = UniversalPath(upath)
		if (upath.IsRoot()):
			return None

		parentPath = upath.GetParent()
		name = upath.GetName()

		for attempt in range(this.retries + 1):
			existing = this._GetDirectory(parentPath)
			if (existing is None):
				return None

			entries = GetDirectoryEntries(existing)
			if (name not in entries):
				return existing
			del entries[name]

			grandparent = this.EnsureAncestryAndSize(parentPath, sum(entries.values()))
			try:
				return this._WriteDirectory(parentPath, existing, grandparent, entries)
			except StaleObject as e:
				this.Backoff(parentPath, attempt, e)

	def WriteObject(this, upath, parent, data, objectType, size=None, annotations=None):
		upath = UniversalPath(upath)

		for attempt in range(this.retries + 1):
			existing = this.executor.GetFsObject(upath)
			try:
				return this.StoreObject(upath, existing, parent, data, objectType, size, annotations)
			except StaleObject as e:
				this.Backoff(upath, attempt, e)

	# One write attempt against the given existing object (or a create when it is None).
	# Raises StaleObject when existing is no longer current.
	def StoreObject(this, upath, existing, parent, data, objectType, size=None, annotations=None):
		if (existing is not None and objectType == ObjectType.FILE and IsDir(existing)):
			raise IsDirectory(f"{upath} is a directory")
		if (existing is not None and objectType != ObjectType.FILE and IsFile(existing)):
			raise NotDirectory(f"{upath} is a file")

		if (size is None):
			size = sum(int(value) for value in data.values())

		allAnnotations = {
			FSOBJ_PATH_ANNOTATION: str(upath),
			FSOBJ_MTIME_ANNOTATION: repr(time.time()),
		}
		if (annotations):
			allAnnotations.update(annotations)

		ret = this.executor.gateway.CreateOrReplace(
			existing,
			ObjectLabels(upath, objectType, size),
			data,
			owner=parent,
			annotations=allAnnotations,
		)

		# Creates cannot be made conditional on labels, so a racing writer may have created the same path.
		# If so, withdraw ours and let the caller retry against theirs.
		if (existing is None):
			try:
				this.executor.gateway.FindByLabels(Selector(upath))
			except AmbiguousObject:
				this.executor.gateway.Delete(ret)
				raise StaleObject(f"{upath} was created concurrently")

		logging.info(f"Stored {objectType} {upath} ({size} bytes) as {ret.metadata.name}")
		return ret

	def _GetDirectory(this, upath):
		existing = this.executor.GetFsObject(upath)
		if (existing is not None and not IsDir(existing)):
			raise NotDirectory(f"{upath} is not a directory")
		return existing

	# The caller brings the parent of upath up to date first; the object it returns (grandparent) owns upath's object.
	# Only this write is retried on conflict.
	def _WriteDirectory(this, upath, existing, grandparent, entries):
		size = sum(entries.values())
		objectType = ObjectType.ROOT if upath.IsRoot() else ObjectType.DIR
		data = {EscapeDataKey(child): str(childSize) for child, childSize in entries.items()}
		return this.StoreObject(upath, existing, grandparent, data, objectType, size=size)

	def Backoff(this, upath, attempt, err):
		if (attempt >= this.retries):
			logging.error(f"Giving up on {upath} after {attempt + 1} conflicting writes.")
			raise err
		logging.warning(f"Concurrent change to {upath}; retrying ({attempt + 1}/{this.retries}).")
		ExponentialSleep(attempt, start=this.executor.conflict_backoff)
