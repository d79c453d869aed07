from .user import UserCreate, UserLogin, UserOut, UserUpdate
from .tokens import Token
from .task import TaskCreate, TaskUpdate, TaskOut, TaskBase, TaskPermissions, UserRef
