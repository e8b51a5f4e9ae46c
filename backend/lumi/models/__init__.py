from .task import Task
from .habit import Habit, HabitCompletion
from .reflection import Reflection
from .notification import ScheduledNotification
