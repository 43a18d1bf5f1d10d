"""
lib/store/KubeConnection.py

Purpose:
Provides the connection to a Kubernetes API server. It wraps the CoreV1Api ConfigMap calls (list by label, create, replace, delete) for a single namespace.

Place in Architecture:
The primary interface between the filesystem and the remote store. All remote object operations go through a connection; the ObjectGateway is its only caller.

Interface:

	__init__(namespace, timeout, max_connections=10, api=None, kubeconfig=None, context=None, in_cluster=False):
		Loads cluster credentials (unless an api is given) and sets up semaphores for concurrency.
	List(labels): ConfigMaps whose labels include every given label.
	Create(body), Replace(name, body), Delete(name, resource_version=None).

TODOs/FIXMEs:
Listing is not paginated; a namespace with very many objects under one label selector will be returned in a single response.
"""

import threading
import logging

from kubernetes import client, config


class KubeConnection(object):
	def __init__(this, namespace, timeout, max_connections=10, api=None, kubeconfig=None, context=None, in_cluster=False):
		assert isinstance(namespace, str)

		this.namespace = namespace
		this.timeout = timeout

		if (api is None):
			if (in_cluster):
				config.load_incluster_config()
			else:
				config.load_kube_config(config_file=kubeconfig, context=context)
			api = client.CoreV1Api()
		this.api = api

		put_conns = max(1, max_connections//2)
		get_conns = max(1, max_connections - put_conns)

		this.get_semaphore = threading.Semaphore(get_conns)
		this.put_semaphore = threading.Semaphore(put_conns)

	def _call(this, is_put, method, *args, **kwargs):
		semaphore = this.put_semaphore if is_put else this.get_semaphore
		kwargs['_request_timeout'] = this.timeout
		with semaphore:
			return method(*args, **kwargs)

	def List(this, labels):
		selector = ",".join(f"{key}={value}" for key, value in labels.items())
		logging.debug(f"Listing ConfigMaps in {this.namespace} with {selector}")
		result = this._call(False, this.api.list_namespaced_config_map, this.namespace, label_selector=selector)
		return list(result.items or [])

	def Create(this, body):
		return this._call(True, this.api.create_namespaced_config_map, this.namespace, body)

	def Replace(this, name, body):
		return this._call(True, this.api.replace_namespaced_config_map, name, this.namespace, body)

	# With a resource_version, the delete fails with 409 if the object changed since it was read.
	def Delete(this, name, resource_version=None):
		if (resource_version is None):
			return this._call(True, this.api.delete_namespaced_config_map, name, this.namespace)
		options = client.V1DeleteOptions(preconditions=client.V1Preconditions(resource_version=resource_version))
		return this._call(True, this.api.delete_namespaced_config_map, name, this.namespace, body=options)
