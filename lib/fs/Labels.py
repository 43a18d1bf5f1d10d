"""
lib/fs/Labels.py

Purpose:
Encodes a filesystem path into the label set that identifies its ConfigMap, independent of the ConfigMap's generated name.

Place in Architecture:
The leaf of the lookup chain. The gateway looks objects up by Selector(); the aggregator writes Encode() + type/size/depth labels onto every object it creates. Also escapes leaf names used as keys of a directory's data map.

Interface:

	Encode(upath): Ordered mapping "kubefs.io/fsobj-name-<i>" -> segment i (empty for root).
	Selector(upath): Encode() plus the depth label; what every lookup uses.
	ObjectLabels(upath, objectType, size): Full label set of a stored object.
	EscapeLabelValue(segment): Verbatim if a legal label value, hashed otherwise.
	EscapeDataKey(name) / UnescapeDataKey(key): Reversible escaping of leaf names used as data keys.

TODOs/FIXMEs:
None.
"""

import re
import errno
import base64
import binascii

from cryptography.hazmat.primitives import hashes

from ..Upath import UniversalPath

LABEL_DOMAIN = "kubefs.io/"
FSOBJ_NAME_KEY_PREFIX = LABEL_DOMAIN + "fsobj-name-"
FSOBJ_TYPE_KEY = LABEL_DOMAIN + "fsobj-type"
FSOBJ_SIZE_KEY = LABEL_DOMAIN + "fsobj-size"
FSOBJ_DEPTH_KEY = LABEL_DOMAIN + "fsobj-depth"

FSOBJ_PATH_ANNOTATION = LABEL_DOMAIN + "fsobj-path"
FSOBJ_ENCODING_ANNOTATION = LABEL_DOMAIN + "fsobj-encoding"
FSOBJ_MTIME_ANNOTATION = LABEL_DOMAIN + "fsobj-mtime"

FSOBJ_NAME_PREFIX = "kubefs-fsobj-"
FSOBJ_CONTENT_KEY = "fsobj-content"

# Kubernetes label values: at most 63 characters, alphanumeric at both ends.
MAX_LABEL_VALUE_LENGTH = 63
LABEL_VALUE_RE = re.compile(r'^(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?$')
HASHED_VALUE_PREFIX = "h."
HASHED_VALUE_DIGITS = 40

# ConfigMap data keys.
MAX_DATA_KEY_LENGTH = 253
DATA_KEY_RE = re.compile(r'^[-._a-zA-Z0-9]+$')
ESCAPED_KEY_PREFIX = "_b64."
ESCAPED_BODY_RE = re.compile(r'^[A-Za-z0-9_-]+$')


def IsValidLabelValue(value):
	return len(value) <= MAX_LABEL_VALUE_LENGTH and LABEL_VALUE_RE.match(value) is not None


# Segments that cannot be label values (or that could be mistaken for a hashed value) are replaced by a digest.
# Digests can collide, so stored objects also carry their full path in an annotation, which lookups check.
def EscapeLabelValue(segment):
	if (IsValidLabelValue(segment) and not segment.startswith(HASHED_VALUE_PREFIX)):
		return segment

	digest = hashes.Hash(hashes.SHA256())
	digest.update(segment.encode('utf-8'))
	return HASHED_VALUE_PREFIX + digest.finalize().hex()[:HASHED_VALUE_DIGITS]


def Encode(upath):
	upath = UniversalPath(upath)
	labels = {}
	for segment in upath.GetSegments():
		labels[FSOBJ_NAME_KEY_PREFIX + str(len(labels))] = EscapeLabelValue(segment)
	return labels


# Label selectors match subsets, so the depth is what keeps "/a" from matching "/a/b".
def Selector(upath):
	upath = UniversalPath(upath)
	labels = Encode(upath)
	labels[FSOBJ_DEPTH_KEY] = str(len(upath))
	return labels


def ObjectLabels(upath, objectType, size):
	labels = Selector(upath)
	labels[FSOBJ_TYPE_KEY] = str(objectType)
	labels[FSOBJ_SIZE_KEY] = str(size)
	return labels


def EscapeDataKey(name):
	if (DATA_KEY_RE.match(name) and len(name) <= MAX_DATA_KEY_LENGTH and not name.startswith(ESCAPED_KEY_PREFIX)):
		return name

	key = ESCAPED_KEY_PREFIX + base64.urlsafe_b64encode(name.encode('utf-8')).decode('ascii').rstrip("=")
	if (len(key) > MAX_DATA_KEY_LENGTH):
		raise IOError(errno.ENAMETOOLONG, f"file name too long: {name}")
	return key


def UnescapeDataKey(key):
	if (not key.startswith(ESCAPED_KEY_PREFIX)):
		return key

	encoded = key[len(ESCAPED_KEY_PREFIX):]
	if (not ESCAPED_BODY_RE.match(encoded)):
		return key
	encoded += "=" * (-len(encoded) % 4)
	try:
		return base64.urlsafe_b64decode(encoded.encode('ascii')).decode('utf-8')
	except (binascii.Error, UnicodeError, ValueError):
		# Not something we wrote; show it as stored.
		return key
