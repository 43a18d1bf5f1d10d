"""
lib/fs/fsop/dir/Make.py

Purpose:
Creates a new directory in the filesystem.

Place in Architecture:
Implements the mkdir operation. It verifies that the target does not already exist, has the aggregator materialize and size the parent chain, then creates the DIR object itself (or the ROOT object, for "/").

Interface:

	directory_make(this, upath): RETURNS the created ConfigMap.

TODOs/FIXMEs:
None.
"""

from ...common.FSOp import FSOp
from ...common.Errors import *
from ...common.ObjectTypes import ObjectType
from ....Upath import UniversalPath


@FSOp
def directory_make(this, upath):
	upath = UniversalPath(upath)

	with this.locks.Hold(upath):
		# Check that the target does not exist
		if (this.GetFsObject(upath) is not None):
			raise FileAlreadyExists(f"{upath} already exists")

		parent = this.aggregator.EnsureAncestryAndSize(upath, 0)

		objectType = ObjectType.ROOT if upath.IsRoot() else ObjectType.DIR
		for attempt in range(this.conflict_retries + 1):
			try:
				return this.aggregator.StoreObject(upath, None, parent, {}, objectType, size=0)
			except StaleObject as e:
				# Our create was withdrawn; only give up if the other one stayed.
				if (this.GetFsObject(upath) is not None):
					raise FileAlreadyExists(f"{upath} already exists")
				this.aggregator.Backoff(upath, attempt, e)
