"""
lib/IntentLog.py

Purpose:
A write-ahead record of copy and move operations, kept in a SQL database through SQLAlchemy.

Place in Architecture:
Copy and Move write an intent before touching the store and mark it COMPLETE, FAILED or ROLLED_BACK afterward. Recover reads the unfinished ones back. The default database is an in-memory SQLite one, which lives as long as the KubeFS; point intent_db at a file or a server to keep intents across restarts and share them between processes.

Interface:

	__init__(url="sqlite://", engine=None)
	Begin(operation, source, target): RETURNS a new PENDING intent.
	Complete(intent), Fail(intent, message), RollBack(intent, message=None): RETURN the updated intent.
	Get(id), All(), Unfinished()

TODOs/FIXMEs:
None.
"""

import errno
import threading
import logging

import sqlalchemy as sql
import sqlalchemy.orm as orm
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from .db.IntentModel import IntentModel, IntentBase
from .fs.common.IntentStates import IntentState


class IntentLog(object):
	def __init__(this, url="sqlite://", engine=None):
		if (engine is None):
			engine = sql.create_engine(url, **this.EngineArgs(url))
		this.engine = engine

		try:
			IntentBase.metadata.create_all(this.engine)
		except SQLAlchemyError as e:
			raise IOError(errno.EIO, f"cannot open intent log {url}: {e}") from e

		this.Session = orm.sessionmaker(bind=this.engine, expire_on_commit=False)

		# SQLite connections are shared between threads.
		this.lock = threading.RLock()

	# An in-memory SQLite database exists once per connection, so every session must share one.
	@staticmethod
	def EngineArgs(url):
		if (not str(url).startswith("sqlite")):
			return {}
		ret = {"connect_args": {"check_same_thread": False}}
		if (str(url) in ("sqlite://", "sqlite:///:memory:")):
			ret["poolclass"] = StaticPool
		return ret

	def Begin(this, operation, source, target):
		intent = IntentModel(
			operation=operation,
			source=str(source),
			target=str(target),
			state=IntentState.PENDING.value,
		)
		with this.lock:
			try:
				with this.Session() as session:
					session.add(intent)
					session.commit()
			except SQLAlchemyError as e:
				raise IOError(errno.EIO, f"cannot record {operation} of {source} to {target}: {e}") from e
		logging.debug(f"Recorded intent {intent}")
		return intent

	def _SetState(this, intent, state, message=None):
		with this.lock:
			try:
				with this.Session() as session:
					stored = session.get(IntentModel, intent.id)
					if (stored is None):
						raise IOError(errno.ENOENT, f"no intent with id {intent.id}")
					stored.state = state.value
					if (message is not None):
						stored.message = message
					session.commit()
			except SQLAlchemyError as e:
				raise IOError(errno.EIO, f"cannot update intent {intent.id}: {e}") from e
		logging.debug(f"Intent {stored.id} is now {state}")
		return stored

	def Complete(this, intent):
		return this._SetState(intent, IntentState.COMPLETE)

	def Fail(this, intent, message):
		return this._SetState(intent, IntentState.FAILED, str(message))

	def RollBack(this, intent, message=None):
		return this._SetState(intent, IntentState.ROLLED_BACK, message)

	def Get(this, id):
		with this.lock:
			with this.Session() as session:
				return session.get(IntentModel, id)

	def All(this):
		with this.lock:
			with this.Session() as session:
				return list(session.execute(sql.select(IntentModel).order_by(IntentModel.id)).scalars())

	def Unfinished(this):
		unfinished = [IntentState.PENDING.value, IntentState.FAILED.value]
		with this.lock:
			with this.Session() as session:
				query = sql.select(IntentModel).where(IntentModel.state.in_(unfinished)).order_by(IntentModel.id)
				return list(session.execute(query).scalars())
