"""
lib/fs/common/ObjectTypes.py

Purpose:
Defines the kinds of filesystem object a ConfigMap can represent.

Place in Architecture:
Written into the fsobj-type label by the aggregator and read back by the object model to classify objects.

Interface:

	Enum members: ROOT, DIR, FILE and UNKNOWN.

TODOs/FIXMEs:
None.
"""

from enum import Enum

# Every store object is exactly one of these. UNKNOWN is never written; it is what an object without a recognizable type label classifies as.
class ObjectType(Enum):
	ROOT = "ROOT"
	DIR = "DIR"
	FILE = "FILE"
	UNKNOWN = "unknown"

	def __str__(self):
		return self.value
