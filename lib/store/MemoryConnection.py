"""
lib/store/MemoryConnection.py

Purpose:
An in-process ConfigMap store with the same interface and failure behavior as KubeConnection.

Place in Architecture:
Drop-in replacement for KubeConnection when no cluster is available: the test suite, local experiments and the command line's --memory mode. Objects are kubernetes.client.V1ConfigMap models, so everything above the connection behaves as it would against an API server.

Interface:

	List(labels), Create(body), Replace(name, body), Delete(name, resource_version=None): As KubeConnection.
	Get(name): A copy of the named object, or None.
	Inject(body): Stores an object verbatim, bypassing name checks. Used to seed corrupt states.
	Objects(): Copies of every stored object.

TODOs/FIXMEs:
None.
"""

import uuid
import threading
from datetime import datetime, timezone

from kubernetes.client import V1ConfigMap, V1ObjectMeta, V1OwnerReference
from kubernetes.client.exceptions import ApiException


# Field-by-field copy; stored objects must never alias what callers hold.
def _clone(cm):
	meta = cm.metadata
	owners = None
	if (meta is not None and meta.owner_references):
		owners = [
			V1OwnerReference(
				api_version=owner.api_version,
				kind=owner.kind,
				name=owner.name,
				uid=owner.uid,
			)
			for owner in meta.owner_references
		]

	clonedMeta = None
	if (meta is not None):
		clonedMeta = V1ObjectMeta(
			name=meta.name,
			namespace=meta.namespace,
			uid=meta.uid,
			labels=dict(meta.labels) if meta.labels is not None else None,
			annotations=dict(meta.annotations) if meta.annotations is not None else None,
			owner_references=owners,
			creation_timestamp=meta.creation_timestamp,
			resource_version=meta.resource_version,
		)

	return V1ConfigMap(
		api_version=cm.api_version or "v1",
		kind=cm.kind or "ConfigMap",
		metadata=clonedMeta,
		data=dict(cm.data) if cm.data is not None else None,
	)


class MemoryConnection(object):
	def __init__(this, namespace="default"):
		this.namespace = namespace
		this.objects = {}
		this.lock = threading.RLock()
		this.version = 0

	def _next_version(this):
		this.version += 1
		return str(this.version)

	def _stamp(this, body, name, uid=None, created=None):
		stored = _clone(body)
		if (stored.metadata is None):
			stored.metadata = V1ObjectMeta()
		stored.metadata.name = name
		stored.metadata.namespace = this.namespace
		stored.metadata.uid = uid or str(uuid.uuid4())
		stored.metadata.creation_timestamp = created or datetime.now(timezone.utc)
		stored.metadata.resource_version = this._next_version()
		return stored

	def List(this, labels):
		with this.lock:
			ret = []
			for cm in this.objects.values():
				existing = cm.metadata.labels or {}
				if (all(existing.get(key) == value for key, value in labels.items())):
					ret.append(_clone(cm))
			return ret

	def Get(this, name):
		with this.lock:
			cm = this.objects.get(name)
			return _clone(cm) if cm is not None else None

	def Objects(this):
		with this.lock:
			return [_clone(cm) for cm in this.objects.values()]

	def Create(this, body):
		with this.lock:
			name = body.metadata.name
			if (name in this.objects):
				raise ApiException(status=409, reason=f"AlreadyExists: configmaps \"{name}\" already exists")
			stored = this._stamp(body, name)
			this.objects[name] = stored
			return _clone(stored)

	def Replace(this, name, body):
		with this.lock:
			current = this.objects.get(name)
			if (current is None):
				raise ApiException(status=404, reason=f"NotFound: configmaps \"{name}\" not found")

			expected = body.metadata.resource_version
			if (expected is not None and expected != current.metadata.resource_version):
				raise ApiException(status=409, reason=f"Conflict: the object \"{name}\" has been modified")

			stored = this._stamp(body, name, current.metadata.uid, current.metadata.creation_timestamp)
			this.objects[name] = stored
			return _clone(stored)

	def Delete(this, name, resource_version=None):
		with this.lock:
			if (name not in this.objects):
				raise ApiException(status=404, reason=f"NotFound: configmaps \"{name}\" not found")
			if (resource_version is not None and resource_version != this.objects[name].metadata.resource_version):
				raise ApiException(status=409, reason=f"Conflict: the object \"{name}\" has been modified")
			del this.objects[name]

	def Inject(this, body):
		with this.lock:
			name = body.metadata.name or f"injected-{uuid.uuid4()}"
			stored = this._stamp(body, name)
			this.objects[name] = stored
			return _clone(stored)
