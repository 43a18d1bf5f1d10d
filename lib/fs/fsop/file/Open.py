"""
lib/fs/fsop/file/Open.py

Purpose:
Opens a file for reading or writing.

Place in Architecture:
RETURNS a ContentChannel over the file's content. Nothing is written to the store until the channel is closed.

Interface:

	file_open(this, upath, mode='r'): RETURNS a ContentChannel. Modes are those of the built-in open(), binary only.

TODOs/FIXMEs:
None.
"""

from ...common.FSOp import FSOp
from ...Channel import ContentChannel


@FSOp
def file_open(this, upath, mode='r'):
	return ContentChannel(this, upath, mode)
