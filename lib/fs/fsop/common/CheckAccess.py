"""
lib/fs/fsop/common/CheckAccess.py

Purpose:
Access checks. There is no permission model: anything that exists may be read and written, and nothing may be executed.

Place in Architecture:
Backs KubeFS.CheckAccess and KubeFS.IsHidden, and the `access` command.

Interface:

	AccessMode: READ, WRITE, EXECUTE.
	common_check_access(this, upath, *modes): Raises NoSuchFile or AccessDenied.
	common_is_hidden(this, upath): RETURNS False.

TODOs/FIXMEs:
None.
"""

import os
from enum import Enum

from ...common.FSOp import FSOp
from ...common.Errors import *
from ....Upath import UniversalPath


class AccessMode(Enum):
	READ = os.R_OK
	WRITE = os.W_OK
	EXECUTE = os.X_OK

	def __str__(self):
		return self.name

	# Accepts an AccessMode, its name, or os.R_OK / os.W_OK / os.X_OK.
	@classmethod
	def Parse(cls, mode):
		if (isinstance(mode, cls)):
			return mode
		if (isinstance(mode, str)):
			try:
				return cls[mode.upper()]
			except KeyError:
				raise ValueError(f"unknown access mode {mode!r}")
		return cls(mode)


@FSOp
def common_check_access(this, upath, *modes):
	upath = UniversalPath(upath)
	modes = [AccessMode.Parse(mode) for mode in modes]

	if (this.GetFsObject(upath) is None):
		raise NoSuchFile(f"{upath} does not exist")

	if (AccessMode.EXECUTE in modes):
		raise AccessDenied(f"execute access to {upath} denied")


# Nothing is hidden; names starting with "." are ordinary names here.
@FSOp
def common_is_hidden(this, upath):
	return False
