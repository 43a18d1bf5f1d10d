"""
lib/fs/fsop/file/Move.py

Purpose:
Implements a file move (rename) operation: a copy to the target followed by a delete of the source. The store has no rename primitive.

Place in Architecture:
Built from the Copy and Unlink FSOps. Not atomic: a failure after the copy leaves both objects in place and is reported as a CompoundFailure naming both steps. The intent log keeps the attempt so Recover can finish it later.

Interface:

	file_move(this, source, target): RETURNS the target ConfigMap.

TODOs/FIXMEs:
None.
"""

import logging

from ...common.FSOp import FSOp
from ...common.Errors import *
from ..common.Unlink import RemoveObject
from .Copy import CheckCopy, CopyObject
from ....Upath import UniversalPath


# Removes whatever a failed copy left behind: the target object, or just its entry in the parent.
def RemovePartialCopy(this, target):
	existing = this.GetFsObject(target)
	if (existing is not None):
		RemoveObject(this, target, existing)
	else:
		this.aggregator.RemoveFromParent(target)


@FSOp
def file_move(this, source, target):
	source = UniversalPath(source)
	target = UniversalPath(target)

	with this.locks.Hold(source, target):
		original = CheckCopy(this, source, target)

		intent = this.intents.Begin("move", source, target)
		try:
			ret = CopyObject(this, target, original)
		except FileAlreadyExists as e:
			# Someone else's target; not ours to clean up.
			this.intents.RollBack(intent, str(e))
			raise
		except (IOError, OSError) as copyError:
			failure = f"copy of {source} to {target} failed: {copyError}"
			try:
				RemovePartialCopy(this, target)
			except (IOError, OSError) as cleanupError:
				failure += f"; cleanup of {target} failed: {cleanupError}"
			this.intents.Fail(intent, failure)
			raise CompoundFailure(failure) from copyError

		try:
			if (not RemoveObject(this, source, original)):
				logging.warning(f"{source} disappeared while being moved to {target}")
		except (IOError, OSError) as deleteError:
			failure = f"copy of {source} to {target} succeeded, but delete of {source} failed: {deleteError}"
			logging.error(f"{failure}; both objects remain")
			this.intents.Fail(intent, failure)
			raise CompoundFailure(failure) from deleteError

		this.intents.Complete(intent)

	return ret
