"""
lib/db/IntentModel.py

Purpose:
Defines the SQLAlchemy ORM model for intents: records of multi-object operations (copy, move) and how far they got.

Place in Architecture:
Persisted by the IntentLog. Only the intent log opens sessions on this table.

Interface:

	Defines columns: id, operation, source, target, state, message, created, updated.
	GetState(): The state as an IntentState.
	__repr__(): Provides a string representation of the model.

TODOs/FIXMEs:
None.
"""

import time

import sqlalchemy as sql
import sqlalchemy.orm as orm

from ..fs.common.IntentStates import IntentState

IntentBase = orm.declarative_base()

# Intents are written before a copy or move touches the store and updated when it finishes.
# An intent left PENDING or FAILED marks an operation whose objects may be inconsistent.
class IntentModel(IntentBase):
	__tablename__ = 'intents'

	id = sql.Column(sql.Integer, primary_key=True)
	operation = sql.Column(sql.String(16), nullable=False) # "copy" or "move"
	source = sql.Column(sql.String, nullable=False)
	target = sql.Column(sql.String, nullable=False)

	state = sql.Column(sql.Integer, nullable=False, default=IntentState.PENDING.value, index=True)
	message = sql.Column(sql.String) # Why the intent failed or was rolled back.

	created = sql.Column(sql.Float, default=time.time)
	updated = sql.Column(sql.Float, default=time.time, onupdate=time.time)

	def GetState(this):
		return IntentState(this.state)

	def __repr__(this):
		return f"<{this.operation} {this.source} -> {this.target} ({this.id}): {this.GetState()}>"
