"""
lib/fs/fsop/common/Unlink.py

Purpose:
Implements the FS operations for unlinking (removing) a filesystem object, file or directory.

Place in Architecture:
Used by Delete and DeleteIfExists, and by Move to remove the source. Deletes the object from the store, then drops its entry from the parent's data map and re-sums the ancestor chain, so deletion keeps sizes consistent the same way creation does.

Interface:

	common_unlink(this, upath): Deletes upath; raises NoSuchFile if it does not exist. RETURNS True.
	common_unlink_if_exists(this, upath): RETURNS True if upath was deleted, False if it did not exist.

TODOs/FIXMEs:
None.
"""

import logging

from ...common.FSOp import FSOp
from ...common.Errors import *
from ...Object import IsDir, GetDirectoryEntries
from ....Upath import UniversalPath


# RETURNS True if this call removed the object, False if someone else removed it first.
# The delete is conditional on the version that was checked; a directory that gained a child in between is re-read and checked again.
def RemoveObject(this, upath, existing):
	if (upath.IsRoot()):
		raise AccessDenied("cannot unlink root directory")

	for attempt in range(this.conflict_retries + 1):
		if (existing is None):
			return False
		if (IsDir(existing) and GetDirectoryEntries(existing)):
			raise DirectoryNotEmpty(f"{upath} is not empty")

		try:
			if (not this.gateway.Delete(existing)):
				return False
			break
		except StaleObject as e:
			this.aggregator.Backoff(upath, attempt, e)
			existing = this.GetFsObject(upath)

	logging.info(f"Deleted {upath} ({existing.metadata.name})")
	this.aggregator.RemoveFromParent(upath)
	return True


@FSOp
def common_unlink(this, upath):
	upath = UniversalPath(upath)

	with this.locks.Hold(upath):
		existing = this.GetFsObject(upath)
		if (existing is None or not RemoveObject(this, upath, existing)):
			raise NoSuchFile(f"{upath} does not exist")
	return True


@FSOp
def common_unlink_if_exists(this, upath):
	upath = UniversalPath(upath)

	with this.locks.Hold(upath):
		existing = this.GetFsObject(upath)
		if (existing is None):
			return False
		return RemoveObject(this, upath, existing)
