"""
lib/store/Gateway.py

Purpose:
A thin, non-retrying wrapper around a store connection that speaks in filesystem objects: find by labels, create-or-replace, delete.

Place in Architecture:
Sits between the connection (KubeConnection or MemoryConnection) and the aggregator / FSOps. Translates store failures into the KubeFS error taxonomy. Every method is a single call; callers treat each one as all-or-nothing.

Interface:

	__init__(connection)
	FindByLabels(labels): The single matching ConfigMap, None, or AmbiguousObject.
	CreateOrReplace(existing, labels, data, owner=None, annotations=None): Writes a whole object.
	Delete(cm): True if deleted, False if it was already gone. StaleObject if cm is no longer current.

TODOs/FIXMEs:
None.
"""

import uuid
import logging

import urllib3
from kubernetes.client import V1ConfigMap, V1ObjectMeta, V1OwnerReference
from kubernetes.client.exceptions import ApiException

from ..fs.Labels import FSOBJ_NAME_PREFIX
from ..fs.common.Errors import *


class ObjectGateway(object):
	def __init__(this, connection):
		this.connection = connection

	def _translate(this, action, err):
		if (isinstance(err, ApiException) and err.status == 409):
			return StaleObject(f"{action} conflicted with a concurrent change: {err.reason}")
		if (isinstance(err, ApiException)):
			return RemoteIOError(f"{action} failed: {err.status} {err.reason}")
		return RemoteIOError(f"{action} failed: {err}")

	def FindByLabels(this, labels):
		try:
			found = this.connection.List(labels)
		except (ApiException, urllib3.exceptions.HTTPError) as e:
			raise this._translate("List", e) from e

		if (len(found) > 1):
			names = ", ".join(sorted(cm.metadata.name for cm in found))
			raise AmbiguousObject(f"Ambiguous filesystem object {labels}; matched more than one ConfigMap: {names}")
		if (len(found) == 1):
			return found[0]
		return None

	# Writes a complete object. When existing is given, its name is reused and its resourceVersion is sent along, so the write fails with StaleObject if someone else replaced it in the meantime.
	def CreateOrReplace(this, existing, labels, data, owner=None, annotations=None):
		if (existing is not None):
			name = existing.metadata.name
		else:
			name = FSOBJ_NAME_PREFIX + str(uuid.uuid4())

		metadata = V1ObjectMeta(
			name=name,
			labels=dict(labels),
			annotations=dict(annotations) if annotations else None,
		)
		if (owner is not None):
			metadata.owner_references = [V1OwnerReference(
				api_version=owner.api_version or "v1",
				kind=owner.kind or "ConfigMap",
				name=owner.metadata.name,
				uid=owner.metadata.uid,
			)]

		body = V1ConfigMap(api_version="v1", kind="ConfigMap", metadata=metadata, data=dict(data))

		try:
			if (existing is not None):
				metadata.resource_version = existing.metadata.resource_version
				ret = this.connection.Replace(name, body)
			else:
				ret = this.connection.Create(body)
		except (ApiException, urllib3.exceptions.HTTPError) as e:
			raise this._translate(f"Writing {name}", e) from e

		logging.debug(f"Wrote ConfigMap {name} with labels {labels}")
		return ret

	# Deletes cm only as it was read: StaleObject if it was replaced since.
	def Delete(this, cm):
		name = cm.metadata.name
		try:
			this.connection.Delete(name, resource_version=cm.metadata.resource_version)
		except ApiException as e:
			if (e.status == 404):
				return False
			raise this._translate(f"Deleting {name}", e) from e
		except urllib3.exceptions.HTTPError as e:
			raise this._translate(f"Deleting {name}", e) from e

		logging.debug(f"Deleted ConfigMap {name}")
		return True
