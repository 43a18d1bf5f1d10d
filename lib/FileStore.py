"""
lib/FileStore.py

Purpose:
Describes the storage backing a KubeFS: which namespace it lives in and how much of it is used.

Place in Architecture:
Returned by KubeFS.GetFileStore and printed by the `df` command. Used space is read from the ROOT object's aggregate size each time it is asked for.

Interface:

	FileStore(executor)
	name, type: The namespace and "configmap".
	IsReadOnly(): False.
	GetUsedSpace(): Aggregate size of "/" in bytes (0 before anything is written).
	GetTotalSpace(), GetUsableSpace(), GetUnallocatedSpace(): 0; the store does not report capacity.

TODOs/FIXMEs:
None.
"""

from .fs.Object import SizeOf
from .Upath import UniversalPath

STORE_TYPE = "configmap"


class FileStore(object):
	def __init__(this, executor):
		this.executor = executor
		this.name = executor.namespace
		this.type = STORE_TYPE

	def __str__(this):
		return f"{this.name} ({this.type})"

	def __repr__(this):
		return f"FileStore({this.name!r})"

	def IsReadOnly(this):
		return False

	def GetUsedSpace(this):
		root = this.executor.GetFsObject(UniversalPath("/"))
		if (root is None):
			return 0
		return SizeOf(root)

	def GetTotalSpace(this):
		return 0

	def GetUsableSpace(this):
		return 0

	def GetUnallocatedSpace(this):
		return 0
