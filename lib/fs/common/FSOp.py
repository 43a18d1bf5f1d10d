"""
lib/fs/common/FSOp.py

Purpose:
Defines the FSOp decorator. Each FSOp is a single filesystem operation (e.g. make a directory, copy a file) written as a plain function whose first argument is the KubeFS executor.

Place in Architecture:
Every module under lib/fs/fsop wraps its operations with FSOp; KubeFS binds the wrapped functions as methods.

Interface:

	FSOp(func): RETURNS func wrapped with call and failure logging.

TODOs/FIXMEs:
None.
"""

import functools
import logging

# An FSOp, or File System Operation, performs a single operation on a file system.
# All FSOps should be:
# - Stateless: They should not store any state between calls; everything lives in the store or the executor.
# - Scalable: Multiple FSOps should be able to run in parallel without interfering with each other.
#
# All locking capabilities will be provided by the governing KubeFS Executor.
def FSOp(func):
	@functools.wraps(func)
	def wrapper(this, *a, **kw):
		logging.debug(f"{func.__name__}{a}")
		try:
			return func(this, *a, **kw)
		except (IOError, OSError):
			logging.debug(f"Failed operation {func.__name__}{a}", exc_info=True)
			raise
	return wrapper
