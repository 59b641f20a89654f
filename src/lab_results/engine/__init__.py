from lab_results.engine.notify import Notification, Notifier
from lab_results.engine.scheduler import EventLoopScheduler, Scheduler, VirtualClock

__all__ = ["Notification", "Notifier", "Scheduler", "VirtualClock", "EventLoopScheduler"]
