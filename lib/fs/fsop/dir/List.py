"""
lib/fs/fsop/dir/List.py

Purpose:
Lists the contents of a directory.

Place in Architecture:
The directory's data map is the listing; no other object is consulted.

Interface:

	directory_list(this, upath): RETURNS a list of child UniversalPaths.

TODOs/FIXMEs:
None.
"""

import errno

from ...common.FSOp import FSOp
from ...common.Errors import *
from ...Object import IsDir, GetDirectoryEntries
from ....Upath import UniversalPath


@FSOp
def directory_list(this, upath):
	upath = UniversalPath(upath)

	existing = this.GetFsObject(upath)
	if (existing is None or not IsDir(existing)):
		raise NotDirectory(f"{upath} is not a directory")

	entries = GetDirectoryEntries(existing)

	# An empty map is an error state unless configured otherwise.
	if (not entries):
		if (this.list_empty_directories):
			return []
		raise IOError(errno.EIO, f"directory {upath} has no entries")

	return [upath.Join(name) for name in entries]
