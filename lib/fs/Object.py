"""
lib/fs/Object.py

Purpose:
Interprets a retrieved ConfigMap as a filesystem object: its type, size, timestamps, file content and directory entries.

Place in Architecture:
Pure functions over kubernetes.client.V1ConfigMap objects. Used by the aggregator, the content channel and the FSOps; never talks to the store.

Interface:

	Classify(cm), IsFile(cm), IsDir(cm), IsRoot(cm)
	SizeOf(cm), CreatedAt(cm), ModifiedAt(cm)
	ContentBytes(cm), EncodeContent(data)
	GetDirectoryEntries(cm)
	GetLabels(cm), GetAnnotations(cm), GetData(cm)

TODOs/FIXMEs:
None.
"""

import time
import base64
import binascii
import logging
from datetime import datetime

from .Labels import *
from .common.ObjectTypes import ObjectType

CONTENT_ENCODING = "base64"


def GetLabels(cm):
	return dict(cm.metadata.labels or {})

def GetAnnotations(cm):
	return dict(cm.metadata.annotations or {})

def GetData(cm):
	return dict(cm.data or {})


def Classify(cm):
	try:
		return ObjectType(GetLabels(cm).get(FSOBJ_TYPE_KEY, str(ObjectType.UNKNOWN)))
	except ValueError:
		return ObjectType.UNKNOWN

def IsFile(cm):
	return Classify(cm) == ObjectType.FILE

def IsDir(cm):
	return Classify(cm) in (ObjectType.DIR, ObjectType.ROOT)

def IsRoot(cm):
	return Classify(cm) == ObjectType.ROOT


def SizeOf(cm):
	size = GetLabels(cm).get(FSOBJ_SIZE_KEY, "0")
	try:
		return int(size)
	except ValueError:
		logging.warning(f"Invalid size label {size!r} on {cm.metadata.name}; assuming 0.")
		return 0


# The API client usually hands back a datetime already; objects loaded from elsewhere may carry the raw string.
def CreatedAt(cm):
	created = cm.metadata.creation_timestamp
	try:
		if (isinstance(created, datetime)):
			return created.timestamp()
		if (isinstance(created, str)):
			return datetime.fromisoformat(created.replace("Z", "+00:00")).timestamp()
	except ValueError:
		pass
	logging.debug(f"No usable creation timestamp on {cm.metadata.name}; using current time.")
	return time.time()


def ModifiedAt(cm):
	mtime = GetAnnotations(cm).get(FSOBJ_MTIME_ANNOTATION)
	if (mtime is not None):
		try:
			return float(mtime)
		except ValueError:
			logging.warning(f"Invalid mtime annotation {mtime!r} on {cm.metadata.name}.")
	return CreatedAt(cm)


# RETURNS the content of a FILE object as bytes.
# Objects without an encoding annotation hold plain text.
def ContentBytes(cm):
	content = GetData(cm).get(FSOBJ_CONTENT_KEY)
	if (content is None):
		return b""

	encoding = GetAnnotations(cm).get(FSOBJ_ENCODING_ANNOTATION)
	try:
		if (encoding == CONTENT_ENCODING):
			return base64.b64decode(content.encode('ascii'), validate=True)
		if (encoding is None):
			return content.encode('utf-8')
	except (binascii.Error, UnicodeError, ValueError) as e:
		logging.warning(f"Undecodable content in {cm.metadata.name}: {e}; returning empty content.")
		return b""

	logging.warning(f"Unknown content encoding {encoding!r} in {cm.metadata.name}; returning empty content.")
	return b""


# RETURNS the text to store as the content entry, and the annotations that describe it.
def EncodeContent(data):
	return base64.b64encode(bytes(data)).decode('ascii'), {FSOBJ_ENCODING_ANNOTATION: CONTENT_ENCODING}


# RETURNS {child name: child size} for a DIR or ROOT object.
def GetDirectoryEntries(cm):
	entries = {}
	for key, value in GetData(cm).items():
		try:
			entries[UnescapeDataKey(key)] = int(value)
		except (TypeError, ValueError):
			logging.warning(f"Invalid size {value!r} for entry {key} of {cm.metadata.name}; assuming 0.")
			entries[UnescapeDataKey(key)] = 0
	return entries
