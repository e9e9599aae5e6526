from enum import Enum
from typing import Union

from attendance_app.utils.logger import get_logger

logger = get_logger("router")


class View(str, Enum):
    DASHBOARD = "DASHBOARD"
    RECOGNITION = "RECOGNITION"
    STUDENTS = "STUDENTS"
    LOGS = "LOGS"

    @property
    def label(self) -> str:
        return VIEW_META[self][0]

    @property
    def title(self) -> str:
        return VIEW_META[self][1]

    @property
    def subtitle(self) -> str:
        return VIEW_META[self][2]


# label (sidebar), page title, page subtitle
VIEW_META = {
    View.DASHBOARD: ("Dashboard", "Campus Dashboard", "Real-time overview of college attendance metrics."),
    View.RECOGNITION: ("Recognition", "Facial Attendance", "Align face within frame for automated scanning."),
    View.STUDENTS: ("Students", "Student Directory", "Manage student profiles and enrollment data."),
    View.LOGS: ("Logs", "Attendance History", "Review detailed logs of daily attendance activities."),
}


class ViewRouter:
    """Holds which screen is active. Any view can be reached from any other."""

    def __init__(self, initial: View = View.DASHBOARD):
        self.active = View(initial)

    def navigate(self, view: Union[View, str]) -> View:
        target = View(view)  # ValueError for unknown names
        if target != self.active:
            logger.debug(f"Navigate {self.active.value} -> {target.value}")
        self.active = target
        return target
