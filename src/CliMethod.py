import errno
import logging
import functools

# Wraps a command so that filesystem errors become exit statuses instead of tracebacks.
# RETURNS 0 on success, the error's errno otherwise.
def CliMethod(func):
	@functools.wraps(func)
	def wrapper(*a, **kw):
		try:
			ret = func(*a, **kw)
			return 0 if ret is None else ret
		except (IOError, OSError) as e:
			logging.debug("Failed operation", exc_info=True)
			logging.error(f"{func.__name__}: {e.strerror or e}")

			if hasattr(e, 'errno') and isinstance(e.errno, int):
				# Standard operation
				return e.errno
			return errno.EACCES

	return wrapper
