from .KubeFS import KubeFS
from .Config import Config
from .FileStore import FileStore
from .IntentLog import IntentLog
from .PathLocks import PathLocks
from .Upath import UniversalPath
from .store.KubeConnection import KubeConnection
from .store.MemoryConnection import MemoryConnection
from .fs.common.Errors import *
from .fs.common.ObjectTypes import ObjectType
from .fs.common.IntentStates import IntentState
from .fs.fsop.common.CheckAccess import AccessMode
