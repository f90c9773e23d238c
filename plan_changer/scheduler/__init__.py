"""
Trigger scheduler exports.
"""

from plan_changer.scheduler.jobs import TriggerScheduler, entry_is_due, local_wall_clock

__all__ = ["TriggerScheduler", "entry_is_due", "local_wall_clock"]
