"""
lib/Config.py

Purpose:
Collects and validates the settings of a KubeFS.

Place in Architecture:
Built once by the KubeFS executor (or the command line) before anything touches the store. After validation every setting is a plain attribute of the right type.

Interface:

	Config(config_file=None, environ=None, **kwargs)
		Each setting is taken from, in order: kwargs, the KUBEFS_<NAME> environment variable, the YAML config file (config_file or KUBEFS_CONFIG), the default below.
	ValidateArgs(): Converts and checks every setting. Raises ConfigError.
	Load(path): RETURNS the mapping stored in a YAML file.

TODOs/FIXMEs:
None.
"""

import os
import logging

import yaml

from .Utils import parse_size, parse_lifetime, parse_bool
from .fs.common.Errors import ConfigError

ENVIRONMENT_PREFIX = "KUBEFS_"

DEFAULTS = {
	"namespace": "default",
	"max_file_size": "100KiB", # Capacity of a content channel.
	"net_timeout": "30", # Kubernetes request timeout (seconds).
	"max_connections": 10,
	"kubeconfig": None,
	"context": None,
	"in_cluster": False, # Use the pod's service account instead of a kubeconfig.
	"intent_db": "sqlite://", # SQLAlchemy URL.
	"redis_host": None, # Cross-process path locks are only taken when this is set.
	"redis_port": 6379,
	"redis_db": 0,
	"lock_timeout": "30", # Seconds to wait for, and to hold, a Redis lock.
	"conflict_retries": 5,
	"conflict_backoff": "0.05", # First retry delay (seconds); doubles per retry.
	"list_empty_directories": False,
}


class Config(object):
	def __init__(this, config_file=None, environ=None, **kwargs):
		unknown = set(kwargs) - set(DEFAULTS)
		if (unknown):
			raise ConfigError(f"error: unknown setting(s) {', '.join(sorted(unknown))}")

		environ = os.environ if environ is None else environ
		config_file = config_file or environ.get(f"{ENVIRONMENT_PREFIX}CONFIG")
		fromFile = this.Load(config_file) if config_file else {}

		for name, default in DEFAULTS.items():
			envName = f"{ENVIRONMENT_PREFIX}{name.upper()}"
			if (kwargs.get(name) is not None):
				value = kwargs[name]
			elif (envName in environ):
				value = environ[envName]
			elif (name in fromFile):
				value = fromFile[name]
			else:
				value = default
			setattr(this, name, value)

		this.config_file = config_file
		this.ValidateArgs()

	@staticmethod
	def Load(path):
		try:
			with open(path) as file:
				ret = yaml.safe_load(file)
		except OSError as e:
			raise ConfigError(f"error: cannot read config file {path}: {e}") from e
		except yaml.YAMLError as e:
			raise ConfigError(f"error: {path} is not valid YAML: {e}") from e

		if (ret is None):
			return {}
		if (not isinstance(ret, dict)):
			raise ConfigError(f"error: {path} must hold a mapping of settings")

		unknown = set(ret) - set(DEFAULTS)
		if (unknown):
			logging.warning(f"Ignoring unknown setting(s) in {path}: {', '.join(sorted(str(key) for key in unknown))}")
		logging.debug(f"Loaded configuration from {path}")
		return ret

	def ValidateArgs(this):
		if (not this.namespace or not isinstance(this.namespace, str)):
			raise ConfigError(f"error: --namespace {this.namespace!r} is not a valid namespace")

		try:
			this.max_file_size = parse_size(this.max_file_size)
			if (this.max_file_size < 0):
				raise ValueError()
		except ValueError:
			raise ConfigError(f"error: --max-file-size {this.max_file_size} is not a valid size specifier")

		try:
			this.net_timeout = float(parse_lifetime(this.net_timeout))
			if not 0 < this.net_timeout < float('inf'):
				raise ValueError()
		except ValueError:
			raise ConfigError(f"error: --net-timeout {this.net_timeout} is not a valid timeout")

		try:
			this.lock_timeout = float(parse_lifetime(this.lock_timeout))
			if not 0 < this.lock_timeout < float('inf'):
				raise ValueError()
		except ValueError:
			raise ConfigError(f"error: --lock-timeout {this.lock_timeout} is not a valid timeout")

		try:
			this.conflict_backoff = float(this.conflict_backoff)
			if (this.conflict_backoff < 0):
				raise ValueError()
		except ValueError:
			raise ConfigError(f"error: --conflict-backoff {this.conflict_backoff} is not a valid delay")

		for name, minimum in (("max_connections", 1), ("conflict_retries", 0), ("redis_port", 1), ("redis_db", 0)):
			try:
				value = int(getattr(this, name))
				if (value < minimum):
					raise ValueError()
			except (TypeError, ValueError):
				raise ConfigError(f"error: --{name.replace('_', '-')} {getattr(this, name)} must be an integer of at least {minimum}")
			setattr(this, name, value)

		for name in ("in_cluster", "list_empty_directories"):
			try:
				setattr(this, name, parse_bool(getattr(this, name)))
			except ValueError:
				raise ConfigError(f"error: --{name.replace('_', '-')} {getattr(this, name)} is not a boolean")

		if (not this.intent_db):
			raise ConfigError("error: --intent-db must be a database URL")
