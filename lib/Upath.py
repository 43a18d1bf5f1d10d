"""
lib/Upath.py

Purpose:
Implements a universal path class that normalizes filesystem paths (upaths) into an absolute, forward-slash form.

Place in Architecture:
Used throughout the code so that every path handed to the label encoder, the aggregator and the FSOps is already resolved. Two upaths are equal when their normalized segment sequences are equal.

Interface:

	__init__(path="/"): Constructs a UniversalPath from a string, bytes or another UniversalPath.
	__str__(): Returns the normalized upath ("/" for root).
	FromPath(path): Normalizes a given path, resolving "." and "..".
	IsRoot(): True for the path with no segments.
	GetParent(): Returns the parent upath, or None for root.
	GetName(): Returns the leaf segment, or None for root.
	GetSegments(): Returns the tuple of segments from root.
	Join(name): Returns a child upath.

TODOs/FIXMEs:
None noted.
"""

import errno
import posixpath


class UniversalPath(object):
	def __init__(this, path="/"):
		if (isinstance(path, UniversalPath)):
			this.upath = path.upath
			this.segments = path.segments
		else:
			this.FromPath(path)

	def __str__(this):
		return this.upath

	def __repr__(this):
		return f"UniversalPath({this.upath!r})"

	def __eq__(this, other):
		if (isinstance(other, str)):
			other = UniversalPath(other)
		if (not isinstance(other, UniversalPath)):
			return NotImplemented
		return this.segments == other.segments

	def __hash__(this):
		return hash(this.segments)

	def __iter__(this):
		return iter(this.segments)

	def __len__(this):
		return len(this.segments)

	def FromPath(this, path):
		if (isinstance(path, bytes)):
			try:
				path = path.decode('utf-8')
			except UnicodeError:
				raise IOError(errno.ENOENT, "file does not exist")
		if (not isinstance(path, str)):
			raise TypeError(f"expected a path string, got {type(path).__name__}")

		# normpath keeps a leading "//", so anchor the path ourselves.
		path = posixpath.normpath("/" + path.lstrip("/"))
		this.segments = tuple(segment for segment in path.split("/") if segment)
		this.upath = "/" + "/".join(this.segments)

	def IsRoot(this):
		return not this.segments

	def GetParent(this):
		if (this.IsRoot()):
			return None
		return UniversalPath("/" + "/".join(this.segments[:-1]))

	def GetName(this):
		if (this.IsRoot()):
			return None
		return this.segments[-1]

	def GetSegments(this):
		return this.segments

	def Join(this, name):
		return UniversalPath(this.upath.rstrip("/") + "/" + name)
