"""
lib/KubeFS.py

Purpose:
Implements the KubeFS executor: a hierarchical filesystem whose files and directories are ConfigMaps in one Kubernetes namespace.

Place in Architecture:
The central coordinator. It builds the store connection, the gateway, the aggregator, the path locks and the intent log from a Config, and exposes every filesystem operation as a method. The operations themselves are FSOps under lib/fs/fsop; they receive the executor as `this` and reach everything they need through it.

Interface:

	__init__(name="KubeFS", config=None, connection=None, intents=None, redisClient=None, **kwargs)
	Operations:
		CreateDirectory(upath), List(upath), Delete(upath), DeleteIfExists(upath)
		Copy(source, target), Move(source, target), Open(upath, mode='r')
		ReadAttributes(upath), CheckAccess(upath, *modes), IsHidden(upath)
		GetFileStore(upath=None), Recover()
	Helpers:
		GetFsObject(upath): The ConfigMap backing upath, or None.
		Exists(upath), ReadBytes(upath), WriteBytes(upath, data)
		StoreFile(upath, content): Persists a whole file; used by channels on close.
		Close()

TODOs/FIXMEs:
None.
"""

import logging

import redis

from .Config import Config
from .IntentLog import IntentLog
from .PathLocks import PathLocks
from .Upath import UniversalPath
from .fs.Aggregator import DirectoryAggregator
from .fs.Labels import *
from .fs.Object import *
from .fs.common.Errors import *
from .fs.common.ObjectTypes import ObjectType
from .store.Gateway import ObjectGateway
from .store.KubeConnection import KubeConnection
from .fs.fsop.dir.Make import directory_make
from .fs.fsop.dir.List import directory_list
from .fs.fsop.common.Unlink import common_unlink, common_unlink_if_exists
from .fs.fsop.common.GetAttributes import common_get_attributes
from .fs.fsop.common.CheckAccess import common_check_access, common_is_hidden
from .fs.fsop.common.GetFileStore import common_get_file_store
from .fs.fsop.common.Recover import common_recover
from .fs.fsop.file.Open import file_open
from .fs.fsop.file.Copy import file_copy
from .fs.fsop.file.Move import file_move


# KubeFS keeps no filesystem state of its own; everything lives in the store (and the intent log).
# NOTE: For thread safety, it is illegal to change any KubeFS settings after it has been constructed.
class KubeFS(object):
	def __init__(this, name="KubeFS", config=None, connection=None, intents=None, redisClient=None, **kwargs):
		this.name = name

		if (config is None):
			config = Config(**kwargs)
		elif (kwargs):
			raise ConfigError(f"error: pass settings either in config or as keywords, not both ({', '.join(sorted(kwargs))})")
		this.config = config

		this.namespace = config.namespace
		this.max_file_size = config.max_file_size
		this.conflict_retries = config.conflict_retries
		this.conflict_backoff = config.conflict_backoff
		this.list_empty_directories = config.list_empty_directories

		if (connection is None):
			connection = KubeConnection(
				config.namespace,
				config.net_timeout,
				max_connections=config.max_connections,
				kubeconfig=config.kubeconfig,
				context=config.context,
				in_cluster=config.in_cluster,
			)
		this.gateway = ObjectGateway(connection)
		this.aggregator = DirectoryAggregator(this)

		if (redisClient is None and config.redis_host):
			redisClient = redis.Redis(host=config.redis_host, port=config.redis_port, db=config.redis_db)
		this.locks = PathLocks(redisClient, timeout=config.lock_timeout, prefix=f"kubefs:{config.namespace}:lock:")

		if (intents is None):
			intents = IntentLog(config.intent_db)
		this.intents = intents

		logging.info(f"{this.name} serving namespace {this.namespace}")

	CreateDirectory = directory_make
	List = directory_list
	Delete = common_unlink
	DeleteIfExists = common_unlink_if_exists
	Copy = file_copy
	Move = file_move
	Open = file_open
	ReadAttributes = common_get_attributes
	CheckAccess = common_check_access
	IsHidden = common_is_hidden
	GetFileStore = common_get_file_store
	Recover = common_recover

	# RETURNS the ConfigMap for upath or None.
	# Hashed label values can collide, so the path annotation has the final say.
	def GetFsObject(this, upath):
		upath = UniversalPath(upath)
		ret = this.gateway.FindByLabels(Selector(upath))
		if (ret is None):
			return None

		storedPath = GetAnnotations(ret).get(FSOBJ_PATH_ANNOTATION)
		if (storedPath is not None and UniversalPath(storedPath) != upath):
			raise AmbiguousObject(f"{ret.metadata.name} matches the labels of {upath} but belongs to {storedPath}")
		return ret

	def Exists(this, upath):
		return this.GetFsObject(upath) is not None

	def ReadBytes(this, upath):
		with this.Open(upath, 'r') as channel:
			return channel.read()

	def WriteBytes(this, upath, data):
		with this.Open(upath, 'w') as channel:
			return channel.write(data)

	# Sizes the parent chain for the new content, then replaces the FILE object as a whole.
	def StoreFile(this, upath, content):
		upath = UniversalPath(upath)
		content = bytes(content)
		if (len(content) > this.max_file_size):
			raise CapacityExceeded(f"{len(content)} bytes exceeds the capacity of {this.max_file_size} bytes for {upath}")
		if (upath.IsRoot()):
			raise IsDirectory(f"{upath} is a directory")

		text, annotations = EncodeContent(content)
		with this.locks.Hold(upath):
			existing = this.GetFsObject(upath)
			if (existing is not None and IsDir(existing)):
				raise IsDirectory(f"{upath} is a directory")

			parent = this.aggregator.EnsureAncestryAndSize(upath, len(content))
			return this.aggregator.WriteObject(
				upath,
				parent,
				{FSOBJ_CONTENT_KEY: text},
				ObjectType.FILE,
				size=len(content),
				annotations=annotations,
			)

	def Close(this):
		this.intents.engine.dispose()
