"""
lib/fs/fsop/common/Recover.py

Purpose:
Replays the intent log, bringing interrupted copies and moves to a defined end state.

Place in Architecture:
Run at startup (or by the `recover` command) while no other writer is working on the same paths; each intent is handled under the path locks of its source and target.

Interface:

	common_recover(this): RETURNS the list of intents processed.

	For every PENDING or FAILED intent:
		target absent                         -> any entry for it in the parent is dropped; ROLLED_BACK
		move, source and target both present  -> target ancestry re-sized, source deleted; COMPLETE
		otherwise                             -> target ancestry re-sized; COMPLETE

TODOs/FIXMEs:
None.
"""

import logging

from ...common.FSOp import FSOp
from ...Object import SizeOf
from .Unlink import RemoveObject
from ....Upath import UniversalPath


@FSOp
def common_recover(this):
	ret = []
	for intent in this.intents.Unfinished():
		source = UniversalPath(intent.source)
		target = UniversalPath(intent.target)

		with this.locks.Hold(source, target):
			sourceObject = this.GetFsObject(source)
			targetObject = this.GetFsObject(target)

			if (targetObject is None):
				this.aggregator.RemoveFromParent(target)
				ret.append(this.intents.RollBack(intent, f"{target} was never written"))
				logging.info(f"Rolled back {intent.operation} of {source} to {target}")
				continue

			this.aggregator.EnsureAncestryAndSize(target, SizeOf(targetObject))
			if (intent.operation == "move" and sourceObject is not None):
				RemoveObject(this, source, sourceObject)
			ret.append(this.intents.Complete(intent))
			logging.info(f"Completed {intent.operation} of {source} to {target}")

	return ret
