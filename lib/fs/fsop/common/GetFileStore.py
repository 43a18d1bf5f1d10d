"""
lib/fs/fsop/common/GetFileStore.py

Purpose:
RETURNS the FileStore that holds a path.

Place in Architecture:
Every path of a KubeFS lives in the same namespace, so the path is only normalized, not looked up.

Interface:

	common_get_file_store(this, upath=None): RETURNS a FileStore.

TODOs/FIXMEs:
None.
"""

from ...common.FSOp import FSOp
from ....FileStore import FileStore
from ....Upath import UniversalPath


@FSOp
def common_get_file_store(this, upath=None):
	if (upath is not None):
		UniversalPath(upath)
	return FileStore(this)
