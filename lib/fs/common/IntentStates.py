"""
lib/fs/common/IntentStates.py

Purpose:
Defines the states of a recorded copy or move intent.

Place in Architecture:
Stored (by value) in the intent log and consulted by KubeFS.Recover.

Interface:

	Enum members: PENDING, COMPLETE, FAILED and ROLLED_BACK.

TODOs/FIXMEs:
None.
"""

from enum import Enum

# Multi-object operations (copy, move) are written to the intent log before they touch the store.
# Each intent has a state, which can be one of the following:
class IntentState(Enum):
	PENDING = 0
	COMPLETE = 1
	FAILED = 2
	ROLLED_BACK = 3

	def __str__(self):
		return self.name
