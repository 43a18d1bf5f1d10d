from kubernetes.client.exceptions import ApiException

from StandardTestFixture import StandardTestFixture

from libkubefs.Upath import UniversalPath
from libkubefs.fs.Object import GetDirectoryEntries
from libkubefs.fs.common.Errors import *
from libkubefs.fs.common.ObjectTypes import ObjectType


class TestDirectoryAggregator(StandardTestFixture):

	# Makes the next `count` replaces fail as if someone else had written first.
	def InjectConflicts(this, monkeypatch, count):
		replace = this.store.Replace
		calls = []

		def Conflicting(name, body):
			calls.append(name)
			if (len(calls) <= count):
				raise ApiException(status=409, reason="Conflict")
			return replace(name, body)

		monkeypatch.setattr(this.store, "Replace", Conflicting)
		return calls

	def test_root_has_no_parent(this):
		assert this.fs.aggregator.EnsureAncestryAndSize("/", 10) is None
		assert this.fs.aggregator.RemoveFromParent("/") is None

	def test_ensure_creates_chain(this):
		parent = this.fs.aggregator.EnsureAncestryAndSize("/a/b/c", 9)
		this.assert_equal(parent.metadata.annotations["kubefs.io/fsobj-path"], "/a/b")
		this.assert_equal(GetDirectoryEntries(parent), {"c": 9})
		this.assert_equal(this.fs.ReadAttributes("/")["size"], 9)

	def test_remove_missing_entry(this):
		this.fs.WriteBytes("/a/f", b"x")
		parent = this.fs.aggregator.RemoveFromParent("/a/never")
		this.assert_equal(GetDirectoryEntries(parent), {"f": 1})
		assert this.fs.aggregator.RemoveFromParent("/nowhere/f") is None

	def test_conflicts_are_retried(this, monkeypatch):
		this.fs.WriteBytes("/a/f", b"x")
		calls = this.InjectConflicts(monkeypatch, 2)

		this.fs.WriteBytes("/a/g", b"yy")

		assert len(calls) > 2
		this.assert_equal(this.fs.ReadAttributes("/a")["size"], 3)
		this.assert_equal(this.fs.ReadAttributes("/")["size"], 3)

	def test_conflicts_exhaust_retries(this, monkeypatch):
		fs = this.MakeFileSystem(conflict_retries=2)
		fs.WriteBytes("/a/f", b"x")
		calls = this.InjectConflicts(monkeypatch, 1000)

		this.assert_raises(StaleObject, fs.WriteBytes, "/a/f", b"changed")

		# The root write is tried once and retried twice; nothing below it is retried after that.
		this.assert_equal(len(calls), 3)
		this.assert_equal(fs.ReadBytes("/a/f"), b"x")

	def test_concurrent_change_is_not_lost(this, monkeypatch):
		this.fs.WriteBytes("/a/f", b"x")
		replace = this.store.Replace
		raced = []

		# Between our read of /a and our write, another writer adds /a/other.
		def Racing(name, body):
			if (not raced and body.metadata.annotations["kubefs.io/fsobj-path"] == "/a"):
				raced.append(name)
				monkeypatch.setattr(this.store, "Replace", replace)
				other = this.MakeFileSystem()
				other.WriteBytes("/a/other", b"zzzz")
			return replace(name, body)

		monkeypatch.setattr(this.store, "Replace", Racing)
		this.fs.WriteBytes("/a/g", b"yy")

		this.assert_equal(sorted(str(child) for child in this.fs.List("/a")), ["/a/f", "/a/g", "/a/other"])
		this.assert_equal(this.fs.ReadAttributes("/a")["size"], 7)
		this.assert_equal(this.fs.ReadAttributes("/")["size"], 7)

	def test_directory_over_file(this):
		this.fs.WriteBytes("/f", b"x")
		this.assert_raises(NotDirectory, this.fs.aggregator.EnsureAncestryAndSize, UniversalPath("/f/g"), 1)


class TestCreateRaces(StandardTestFixture):

	# The next create of `objectType` is withdrawn as if it lost a race; `rival` runs first when given.
	def WithdrawFirstCreate(this, monkeypatch, objectType, rival=None):
		store = this.fs.aggregator.StoreObject
		withdrawn = []

		def Withdrawing(upath, existing, parent, data, kind, *a, **kw):
			if (existing is None and kind == objectType and not withdrawn):
				withdrawn.append(str(upath))
				if (rival is not None):
					rival()
				raise StaleObject(f"{upath} was created concurrently")
			return store(upath, existing, parent, data, kind, *a, **kw)

		monkeypatch.setattr(this.fs.aggregator, "StoreObject", Withdrawing)
		return withdrawn

	def test_make_retries_when_both_withdrew(this, monkeypatch):
		withdrawn = this.WithdrawFirstCreate(monkeypatch, ObjectType.DIR)
		this.fs.CreateDirectory("/d")
		this.assert_equal(withdrawn, ["/d"])
		this.assert_equal(this.fs.ReadAttributes("/d")["type"], "dir")

	def test_make_yields_to_surviving_rival(this, monkeypatch):
		rival = this.MakeFileSystem()
		this.WithdrawFirstCreate(monkeypatch, ObjectType.DIR, lambda: rival.CreateDirectory("/d"))
		this.assert_raises(FileAlreadyExists, this.fs.CreateDirectory, "/d")
		this.assert_equal(len(this.StoredAt("/d")), 1)
		rival.Close()

	def test_copy_retries_when_both_withdrew(this, monkeypatch):
		this.fs.WriteBytes("/f", b"data")
		withdrawn = this.WithdrawFirstCreate(monkeypatch, ObjectType.FILE)
		this.fs.Copy("/f", "/g")
		this.assert_equal(withdrawn, ["/g"])
		this.assert_equal(this.fs.ReadBytes("/g"), b"data")

	def test_copy_yields_to_surviving_rival(this, monkeypatch):
		this.fs.WriteBytes("/f", b"data")
		rival = this.MakeFileSystem()
		this.WithdrawFirstCreate(monkeypatch, ObjectType.FILE, lambda: rival.WriteBytes("/g", b"theirs"))
		this.assert_raises(FileAlreadyExists, this.fs.Copy, "/f", "/g")
		this.assert_equal(this.fs.ReadBytes("/g"), b"theirs")
		rival.Close()
