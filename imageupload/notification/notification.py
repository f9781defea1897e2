from dataclasses import dataclass

from imageupload.events.emitter import Emitter, EventInfo, Priority
from imageupload.logging.logger import Log


@dataclass(frozen=True)
class NotificationData:
    message: str
    title: str = ""
    namespace: str = ""


class Notification(Emitter):
    """Fire-and-forget user notifications.

    ``show_warning`` fires ``show:warning``. Presentation layers subscribe with
    a higher priority and stop the event; the fallback listener logs it.
    """

    def __init__(self) -> None:
        super().__init__()
        self.on("show:warning", self._log_warning, priority=Priority.LOWEST)

    def show_warning(self, message: str, *, title: str = "", namespace: str = "") -> None:
        self.fire("show:warning", NotificationData(message=message, title=title, namespace=namespace))

    @staticmethod
    def _log_warning(info: EventInfo, data: NotificationData) -> None:
        _ = info
        Log.warning(f"{data.title}: {data.message}" if data.title else data.message)
