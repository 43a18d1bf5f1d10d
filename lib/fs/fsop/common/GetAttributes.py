"""
lib/fs/fsop/common/GetAttributes.py

Purpose:
Implements the FS operation for obtaining attributes (akin to getattr) of a file or directory.

Place in Architecture:
Reads the object once and interprets it with the object model. Channels still open on the path are not consulted; their content is not in the store yet.

Interface:

	common_get_attributes(this, upath): RETURNS a dictionary of attributes:
		type: 'file', 'dir' or 'unknown'
		root: True for the ROOT object
		size: bytes (aggregate size for directories)
		ctime, mtime: epoch seconds
		name, uid: the backing ConfigMap's generated name and uid

TODOs/FIXMEs:
None.
"""

from ...common.FSOp import FSOp
from ...common.Errors import *
from ...Object import *
from ....Upath import UniversalPath


@FSOp
def common_get_attributes(this, upath):
	upath = UniversalPath(upath)

	existing = this.GetFsObject(upath)
	if (existing is None):
		raise NoSuchFile(f"{upath} does not exist")

	if (IsFile(existing)):
		kind = 'file'
	elif (IsDir(existing)):
		kind = 'dir'
	else:
		kind = 'unknown'

	return {
		'type': kind,
		'root': IsRoot(existing),
		'size': SizeOf(existing),
		'ctime': CreatedAt(existing),
		'mtime': ModifiedAt(existing),
		'name': existing.metadata.name,
		'uid': existing.metadata.uid,
	}
