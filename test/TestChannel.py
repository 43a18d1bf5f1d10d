import io
import errno

import pytest
from kubernetes.client import V1ConfigMap, V1ObjectMeta

from StandardTestFixture import StandardTestFixture

from libkubefs.fs.common.Errors import *
from libkubefs.fs.Labels import Selector, FSOBJ_CONTENT_KEY


class TestContentChannel(StandardTestFixture):

	def test_nothing_is_stored_before_close(this):
		channel = this.fs.Open("/f", "w")
		channel.write(b"hello")
		assert not this.fs.Exists("/f")
		this.assert_equal(this.store.Objects(), [])

		channel.close()
		this.assert_equal(this.fs.ReadBytes("/f"), b"hello")

	def test_random_access(this):
		with this.fs.Open("/f", "w+") as channel:
			channel.write(b"hello world")
			channel.seek(6)
			channel.write(b"WORLD")
			channel.seek(0)
			this.assert_equal(channel.read(5), b"hello")
			this.assert_equal(channel.tell(), 5)
			this.assert_equal(channel.read(), b" WORLD")
			this.assert_equal(channel.read(), b"")
			this.assert_equal(channel.size(), 11)
		this.assert_equal(this.fs.ReadBytes("/f"), b"hello WORLD")

	def test_seek_whence(this):
		with this.fs.Open("/f", "w+") as channel:
			channel.write(b"0123456789")
			this.assert_equal(channel.seek(-3, io.SEEK_END), 7)
			this.assert_equal(channel.seek(1, io.SEEK_CUR), 8)
			this.assert_equal(channel.read(), b"89")
			with pytest.raises(IOError) as info:
				channel.seek(-1)
			this.assert_equal(info.value.errno, errno.EINVAL)

	def test_write_past_end_pads_with_zeros(this):
		with this.fs.Open("/f", "w") as channel:
			channel.write(b"ab")
			channel.seek(5)
			channel.write(b"c")
		this.assert_equal(this.fs.ReadBytes("/f"), b"ab\x00\x00\x00c")
		this.assert_equal(this.fs.ReadAttributes("/f")["size"], 6)

	def test_truncate(this):
		this.fs.WriteBytes("/f", b"0123456789")
		with this.fs.Open("/f", "r+") as channel:
			channel.truncate(4)
			this.assert_equal(channel.read(), b"0123")
			channel.truncate(6)
		this.assert_equal(this.fs.ReadBytes("/f"), b"0123\x00\x00")

	def test_modes(this):
		this.fs.WriteBytes("/f", b"abc")

		with this.fs.Open("/f", "a") as channel:
			channel.seek(0)
			channel.write(b"def")
		this.assert_equal(this.fs.ReadBytes("/f"), b"abcdef")

		with this.fs.Open("/f", "r+") as channel:
			channel.write(b"X")
		this.assert_equal(this.fs.ReadBytes("/f"), b"Xbcdef")

		with this.fs.Open("/f", "w") as channel:
			this.assert_equal(channel.size(), 0)
		this.assert_equal(this.fs.ReadBytes("/f"), b"")

		this.assert_raises(FileAlreadyExists, this.fs.Open, "/f", "x")
		with this.fs.Open("/g", "x") as channel:
			channel.write(b"new")
		this.assert_equal(this.fs.ReadBytes("/g"), b"new")

		this.assert_raises(NoSuchFile, this.fs.Open, "/missing", "r")
		this.assert_raises(ValueError, this.fs.Open, "/f", "rw")

	def test_read_only_channel(this):
		this.fs.WriteBytes("/f", b"abc")
		before = this.StoredAt("/f")[0].metadata.resource_version

		with this.fs.Open("/f") as channel:
			assert channel.readable() and not channel.writable() and channel.seekable()
			with pytest.raises(IOError) as info:
				channel.write(b"x")
			this.assert_equal(info.value.errno, errno.EBADF)

		this.assert_equal(this.StoredAt("/f")[0].metadata.resource_version, before)

	def test_write_only_channel(this):
		with this.fs.Open("/f", "w") as channel:
			assert channel.writable() and not channel.readable()
			this.assert_raises(IOError, channel.read)

	def test_capacity(this):
		fs = this.MakeFileSystem(max_file_size=8)
		with fs.Open("/f", "w") as channel:
			channel.write(b"12345")
			this.assert_raises(CapacityExceeded, channel.write, b"6789")
			this.assert_equal(channel.size(), 5)
			channel.write(b"678")
			this.assert_raises(CapacityExceeded, channel.truncate, 9)
		this.assert_equal(fs.ReadBytes("/f"), b"12345678")

	def test_exception_discards(this):
		with pytest.raises(RuntimeError):
			with this.fs.Open("/f", "w") as channel:
				channel.write(b"half")
				raise RuntimeError("interrupted")
		assert not this.fs.Exists("/f")

	def test_close_is_idempotent(this):
		channel = this.fs.Open("/f", "w")
		channel.write(b"once")
		channel.close()
		version = this.StoredAt("/f")[0].metadata.resource_version

		channel.close()
		assert channel.closed
		this.assert_equal(this.StoredAt("/f")[0].metadata.resource_version, version)

		with pytest.raises(IOError) as info:
			channel.read()
		this.assert_equal(info.value.errno, errno.EBADF)

	def test_channels_are_independent(this):
		this.fs.WriteBytes("/f", b"base")
		first = this.fs.Open("/f", "r+")
		second = this.fs.Open("/f", "r+")

		first.write(b"ONE!")
		this.assert_equal(second.read(), b"base")

		first.close()
		second.close()
		this.assert_equal(this.fs.ReadBytes("/f"), b"base")

	def test_untyped_object(this):
		this.store.Inject(V1ConfigMap(
			metadata=V1ObjectMeta(name="odd", labels=Selector("/odd")),
			data={FSOBJ_CONTENT_KEY: "not ours"},
		))

		for mode in ("r", "r+", "w", "a"):
			with pytest.raises(IOError) as info:
				this.fs.Open("/odd", mode)
			this.assert_equal(info.value.errno, errno.EINVAL)
		this.assert_equal(this.store.Get("odd").data, {FSOBJ_CONTENT_KEY: "not ours"})
