import sys
import errno
import argparse
import logging

import yaml
from kubernetes.config.config_exception import ConfigException

from libkubefs import KubeFS, Config, MemoryConnection, AccessMode, ConfigError
from libkubefs.Config import DEFAULTS

from .CliMethod import *

ACCESS_MODES = {
	'r': AccessMode.READ,
	'w': AccessMode.WRITE,
	'x': AccessMode.EXECUTE,
}


# KUBEFS is the command line face of a KubeFS.
# Name is caps to match the executable.
# Every command takes the parsed arguments and RETURNS an exit status.
class KUBEFS(object):
	def __init__(this, fs, stdout=None, stdin=None):
		this.fs = fs
		this.stdout = stdout if stdout is not None else sys.stdout
		this.stdin = stdin if stdin is not None else sys.stdin

	def Print(this, text):
		this.stdout.write(f"{text}\n")

	def WriteBinary(this, data):
		out = getattr(this.stdout, 'buffer', this.stdout)
		out.write(data)
		out.flush()

	def ReadBinary(this):
		inp = getattr(this.stdin, 'buffer', this.stdin)
		return inp.read()

	@CliMethod
	def ls(this, args):
		for child in this.fs.List(args.path):
			this.Print(str(child) if args.full else child.GetName())

	@CliMethod
	def cat(this, args):
		for path in args.paths:
			this.WriteBinary(this.fs.ReadBytes(path))

	@CliMethod
	def put(this, args):
		if (args.file is not None):
			with open(args.file, 'rb') as file:
				data = file.read()
		else:
			data = this.ReadBinary()
		this.fs.WriteBytes(args.path, data)

	@CliMethod
	def mkdir(this, args):
		for path in args.paths:
			this.fs.CreateDirectory(path)

	@CliMethod
	def rm(this, args):
		for path in args.paths:
			if (args.force):
				this.fs.DeleteIfExists(path)
			else:
				this.fs.Delete(path)

	@CliMethod
	def cp(this, args):
		this.fs.Copy(args.source, args.target)

	@CliMethod
	def mv(this, args):
		this.fs.Move(args.source, args.target)

	@CliMethod
	def stat(this, args):
		attributes = this.fs.ReadAttributes(args.path)
		this.stdout.write(yaml.safe_dump({str(args.path): attributes}, default_flow_style=False, sort_keys=False))

	@CliMethod
	def access(this, args):
		this.fs.CheckAccess(args.path, *[ACCESS_MODES[mode] for mode in args.mode])

	@CliMethod
	def df(this, args):
		store = this.fs.GetFileStore(args.path)
		this.Print(f"{store.name}\t{store.type}\t{store.GetUsedSpace()}\t{'ro' if store.IsReadOnly() else 'rw'}")

	@CliMethod
	def recover(this, args):
		for intent in this.fs.Recover():
			this.Print(f"{intent.operation}\t{intent.source}\t{intent.target}\t{intent.GetState()}")


def BuildParser():
	parser = argparse.ArgumentParser(
		prog="kubefs",
		description="A filesystem stored in Kubernetes ConfigMaps.",
	)

	parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
	parser.add_argument("--config", help="YAML file of settings (default: $KUBEFS_CONFIG)")
	parser.add_argument("--memory", action="store_true", help="use an in-process store instead of a cluster")

	parser.add_argument("-n", "--namespace", help=f"Kubernetes namespace (default: {DEFAULTS['namespace']})")
	parser.add_argument("--kubeconfig", help="kubeconfig file")
	parser.add_argument("--context", help="kubeconfig context")
	parser.add_argument("--in-cluster", action="store_const", const=True, help="use the pod's service account")
	parser.add_argument("--max-file-size", help=f"largest file, e.g. 100KiB (default: {DEFAULTS['max_file_size']})")
	parser.add_argument("--net-timeout", help=f"request timeout in seconds (default: {DEFAULTS['net_timeout']})")
	parser.add_argument("--max-connections", help=f"concurrent requests (default: {DEFAULTS['max_connections']})")
	parser.add_argument("--intent-db", help=f"SQLAlchemy URL of the intent log (default: {DEFAULTS['intent_db']})")
	parser.add_argument("--redis-host", help="Redis host for cross-process locks")
	parser.add_argument("--redis-port", help=f"(default: {DEFAULTS['redis_port']})")
	parser.add_argument("--redis-db", help=f"(default: {DEFAULTS['redis_db']})")
	parser.add_argument("--lock-timeout", help=f"seconds (default: {DEFAULTS['lock_timeout']})")
	parser.add_argument("--conflict-retries", help=f"(default: {DEFAULTS['conflict_retries']})")
	parser.add_argument("--list-empty-directories", action="store_const", const=True, help="list empty directories instead of failing")

	sub = parser.add_subparsers(dest="command")

	p_ls = sub.add_parser("ls", help="list a directory")
	p_ls.add_argument("path", nargs="?", default="/")
	p_ls.add_argument("-l", "--full", action="store_true", help="print full paths")

	p_cat = sub.add_parser("cat", help="print file contents")
	p_cat.add_argument("paths", nargs="+")

	p_put = sub.add_parser("put", help="write a file from stdin or --file")
	p_put.add_argument("path")
	p_put.add_argument("-f", "--file", help="local file to upload")

	p_mkdir = sub.add_parser("mkdir", help="create directories")
	p_mkdir.add_argument("paths", nargs="+")

	p_rm = sub.add_parser("rm", help="delete files or empty directories")
	p_rm.add_argument("paths", nargs="+")
	p_rm.add_argument("-f", "--force", action="store_true", help="ignore missing paths")

	p_cp = sub.add_parser("cp", help="copy a file")
	p_cp.add_argument("source")
	p_cp.add_argument("target")

	p_mv = sub.add_parser("mv", help="move a file")
	p_mv.add_argument("source")
	p_mv.add_argument("target")

	p_stat = sub.add_parser("stat", help="show attributes")
	p_stat.add_argument("path")

	p_access = sub.add_parser("access", help="check access; exits non-zero if denied")
	p_access.add_argument("path")
	p_access.add_argument("-m", "--mode", default="r", help="any of r, w, x (default: r)")

	p_df = sub.add_parser("df", help="show the file store")
	p_df.add_argument("path", nargs="?", default="/")

	sub.add_parser("recover", help="finish or roll back interrupted copies and moves")

	return parser


def BuildFileSystem(args):
	settings = {}
	for name in DEFAULTS:
		value = getattr(args, name, None)
		if (value is not None):
			settings[name] = value

	config = Config(config_file=args.config, **settings)
	connection = MemoryConnection(config.namespace) if args.memory else None
	return KubeFS(config=config, connection=connection)


def main(argv=None, fs=None):
	parser = BuildParser()
	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)

	if (args.command is None):
		parser.print_help()
		return 2

	if (args.command == "access" and not set(args.mode) <= set(ACCESS_MODES)):
		parser.error(f"invalid access mode {args.mode!r}")

	if (fs is not None):
		return getattr(KUBEFS(fs), args.command)(args)

	try:
		fs = BuildFileSystem(args)
	except ConfigError as e:
		logging.error(str(e))
		return 2
	except ConfigException as e:
		logging.error(f"cannot load Kubernetes configuration: {e}")
		return errno.EINVAL
	except (IOError, OSError) as e:
		logging.error(str(e))
		return e.errno if isinstance(e.errno, int) else errno.EIO

	# A filesystem built here is ours to close.
	try:
		return getattr(KUBEFS(fs), args.command)(args)
	finally:
		fs.Close()

