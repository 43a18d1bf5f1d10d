"""
lib/fs/fsop/file/Copy.py

Purpose:
Implements a file copy operation. The target gets the source's stored content and size; the source is left untouched.

Place in Architecture:
Runs the aggregator for the target's parent chain with the source's size, then creates the target object. The copy is recorded in the intent log so that Recover can tell a finished copy from an interrupted one. Move reuses CheckCopy and CopyObject.

Interface:

	file_copy(this, source, target): RETURNS the target ConfigMap.
	CheckCopy(this, source, target): Precondition checks. RETURNS the source ConfigMap.
	CopyObject(this, target, original): Writes the copy.

TODOs/FIXMEs:
None.
"""

import errno

from ...common.FSOp import FSOp
from ...common.Errors import *
from ...common.ObjectTypes import ObjectType
from ...Labels import FSOBJ_CONTENT_KEY, FSOBJ_ENCODING_ANNOTATION
from ...Object import *
from ....Upath import UniversalPath


def CheckCopy(this, source, target):
	original = this.GetFsObject(source)
	if (original is None):
		raise NoSuchFile(f"{source} does not exist")
	if (IsDir(original)):
		raise IsDirectory(f"{source} is a directory")
	if (not IsFile(original)):
		raise IOError(errno.EINVAL, f"{source} is not a regular file")

	if (this.GetFsObject(target) is not None):
		raise FileAlreadyExists(f"{target} already exists")

	return original


# The stored text and its encoding annotation are copied as is, so legacy plain text stays plain text.
def CopyObject(this, target, original):
	size = SizeOf(original)

	data = {}
	content = GetData(original).get(FSOBJ_CONTENT_KEY)
	if (content is not None):
		data[FSOBJ_CONTENT_KEY] = content

	annotations = {}
	encoding = GetAnnotations(original).get(FSOBJ_ENCODING_ANNOTATION)
	if (encoding is not None):
		annotations[FSOBJ_ENCODING_ANNOTATION] = encoding

	parent = this.aggregator.EnsureAncestryAndSize(target, size)
	for attempt in range(this.conflict_retries + 1):
		try:
			return this.aggregator.StoreObject(target, None, parent, data, ObjectType.FILE, size=size, annotations=annotations)
		except StaleObject as e:
			if (this.GetFsObject(target) is not None):
				raise FileAlreadyExists(f"{target} was created concurrently")
			this.aggregator.Backoff(target, attempt, e)


@FSOp
def file_copy(this, source, target):
	source = UniversalPath(source)
	target = UniversalPath(target)

	with this.locks.Hold(source, target):
		original = CheckCopy(this, source, target)

		intent = this.intents.Begin("copy", source, target)
		try:
			ret = CopyObject(this, target, original)
		except (IOError, OSError) as e:
			this.intents.Fail(intent, f"copy of {source} to {target} failed: {e}")
			raise
		this.intents.Complete(intent)

	return ret
