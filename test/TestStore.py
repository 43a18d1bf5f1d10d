from unittest.mock import MagicMock

import pytest
import urllib3
from kubernetes.client import V1ConfigMap, V1ConfigMapList, V1ObjectMeta
from kubernetes.client.exceptions import ApiException

from StandardTestFixture import StandardTestFixture

from libkubefs.fs.common.Errors import *
from libkubefs.store.Gateway import ObjectGateway
from libkubefs.store.KubeConnection import KubeConnection


def MakeBody(name, labels, data=None):
	return V1ConfigMap(metadata=V1ObjectMeta(name=name, labels=labels), data=data or {})


class TestMemoryConnection(StandardTestFixture):

	def test_create_assigns_identity(this):
		created = this.store.Create(MakeBody("one", {"k": "v"}))
		assert created.metadata.uid
		assert created.metadata.resource_version
		assert created.metadata.creation_timestamp is not None
		this.assert_equal(created.metadata.namespace, "kubefs-test")

	def test_create_existing_name_conflicts(this):
		this.store.Create(MakeBody("one", {}))
		with pytest.raises(ApiException) as info:
			this.store.Create(MakeBody("one", {}))
		this.assert_equal(info.value.status, 409)

	def test_list_matches_label_subsets(this):
		this.store.Create(MakeBody("one", {"a": "1", "b": "2"}))
		this.store.Create(MakeBody("two", {"a": "1"}))
		this.assert_equal(sorted(cm.metadata.name for cm in this.store.List({"a": "1"})), ["one", "two"])
		this.assert_equal([cm.metadata.name for cm in this.store.List({"a": "1", "b": "2"})], ["one"])

	def test_replace_checks_resource_version(this):
		created = this.store.Create(MakeBody("one", {}, {"x": "1"}))

		body = MakeBody("one", {}, {"x": "2"})
		body.metadata.resource_version = created.metadata.resource_version
		replaced = this.store.Replace("one", body)
		this.assert_equal(replaced.data, {"x": "2"})
		this.assert_equal(replaced.metadata.uid, created.metadata.uid)

		# The old version is stale now.
		with pytest.raises(ApiException) as info:
			this.store.Replace("one", body)
		this.assert_equal(info.value.status, 409)

	def test_missing_objects(this):
		with pytest.raises(ApiException) as info:
			this.store.Replace("ghost", MakeBody("ghost", {}))
		this.assert_equal(info.value.status, 404)

		with pytest.raises(ApiException) as info:
			this.store.Delete("ghost")
		this.assert_equal(info.value.status, 404)

	def test_stored_objects_are_copies(this):
		body = MakeBody("one", {"a": "1"}, {"x": "1"})
		this.store.Create(body)
		body.data["x"] = "changed"
		this.store.List({"a": "1"})[0].data["x"] = "changed too"
		this.assert_equal(this.store.Get("one").data, {"x": "1"})


class TestGateway(StandardTestFixture):

	def test_find_by_labels(this):
		gateway = ObjectGateway(this.store)
		assert gateway.FindByLabels({"a": "1"}) is None

		this.store.Create(MakeBody("one", {"a": "1"}))
		this.assert_equal(gateway.FindByLabels({"a": "1"}).metadata.name, "one")

		this.store.Create(MakeBody("two", {"a": "1"}))
		this.assert_raises(AmbiguousObject, gateway.FindByLabels, {"a": "1"})

	def test_create_then_replace_keeps_name(this):
		gateway = ObjectGateway(this.store)
		created = gateway.CreateOrReplace(None, {"a": "1"}, {"x": "1"})
		assert created.metadata.name.startswith("kubefs-fsobj-")

		replaced = gateway.CreateOrReplace(created, {"a": "1"}, {"x": "2"})
		this.assert_equal(replaced.metadata.name, created.metadata.name)
		this.assert_equal(replaced.data, {"x": "2"})

	def test_owner_reference(this):
		gateway = ObjectGateway(this.store)
		parent = gateway.CreateOrReplace(None, {"p": "1"}, {})
		child = gateway.CreateOrReplace(None, {"c": "1"}, {}, owner=parent)
		this.assert_equal(child.metadata.owner_references[0].uid, parent.metadata.uid)
		this.assert_equal(child.metadata.owner_references[0].name, parent.metadata.name)

	def test_stale_replace(this):
		gateway = ObjectGateway(this.store)
		created = gateway.CreateOrReplace(None, {"a": "1"}, {})
		gateway.CreateOrReplace(created, {"a": "1"}, {"x": "1"})
		this.assert_raises(StaleObject, gateway.CreateOrReplace, created, {"a": "1"}, {"x": "2"})

	def test_delete(this):
		gateway = ObjectGateway(this.store)
		created = gateway.CreateOrReplace(None, {"a": "1"}, {})
		assert gateway.Delete(created)
		assert not gateway.Delete(created)

	def test_stale_delete(this):
		gateway = ObjectGateway(this.store)
		created = gateway.CreateOrReplace(None, {"a": "1"}, {})
		replaced = gateway.CreateOrReplace(created, {"a": "1"}, {"x": "1"})

		this.assert_raises(StaleObject, gateway.Delete, created)
		assert this.store.Get(created.metadata.name) is not None
		assert gateway.Delete(replaced)

	def test_store_failures_are_wrapped(this):
		connection = MagicMock()
		connection.List.side_effect = ApiException(status=500, reason="Internal Server Error")
		connection.Create.side_effect = urllib3.exceptions.MaxRetryError(None, "/api", "refused")
		gateway = ObjectGateway(connection)

		with pytest.raises(RemoteIOError) as info:
			gateway.FindByLabels({"a": "1"})
		assert not isinstance(info.value, StaleObject)
		this.assert_raises(RemoteIOError, gateway.CreateOrReplace, None, {"a": "1"}, {})


class TestKubeConnection(StandardTestFixture):

	def test_list_builds_selector(this):
		api = MagicMock()
		api.list_namespaced_config_map.return_value = V1ConfigMapList(items=[MakeBody("one", {})])
		connection = KubeConnection("ns", 7, api=api)

		found = connection.List({"kubefs.io/fsobj-name-0": "a", "kubefs.io/fsobj-depth": "1"})

		this.assert_equal([cm.metadata.name for cm in found], ["one"])
		api.list_namespaced_config_map.assert_called_once_with(
			"ns",
			label_selector="kubefs.io/fsobj-name-0=a,kubefs.io/fsobj-depth=1",
			_request_timeout=7,
		)

	def test_writes(this):
		api = MagicMock()
		connection = KubeConnection("ns", 7, api=api)
		body = MakeBody("one", {})

		connection.Create(body)
		connection.Replace("one", body)
		connection.Delete("one")

		api.create_namespaced_config_map.assert_called_once_with("ns", body, _request_timeout=7)
		api.replace_namespaced_config_map.assert_called_once_with("one", "ns", body, _request_timeout=7)
		api.delete_namespaced_config_map.assert_called_once_with("one", "ns", _request_timeout=7)

	def test_delete_with_precondition(this):
		api = MagicMock()
		connection = KubeConnection("ns", 7, api=api)

		connection.Delete("one", resource_version="42")

		options = api.delete_namespaced_config_map.call_args.kwargs["body"]
		this.assert_equal(options.preconditions.resource_version, "42")

	def test_loads_kubeconfig(this, monkeypatch):
		loaded = {}
		monkeypatch.setattr("kubernetes.config.load_kube_config", lambda config_file=None, context=None: loaded.update(file=config_file, context=context))
		monkeypatch.setattr("kubernetes.client.CoreV1Api", MagicMock)

		connection = KubeConnection("ns", 7, kubeconfig="/tmp/kubeconfig", context="dev")
		this.assert_equal(loaded, {"file": "/tmp/kubeconfig", "context": "dev"})
		assert isinstance(connection.api, MagicMock)
