"""Recording handlers shared by the observation tests."""


class RecordingHandler:
    """Handler that appends (label, phase, context name) to a shared list."""

    def __init__(self, label: str, events: list, supports: bool = True):
        self.label = label
        self.events = events
        self.supports = supports
        self.supports_calls = 0

    def supports_context(self, context) -> bool:
        self.supports_calls += 1
        return self.supports

    def on_start(self, context) -> None:
        self.events.append((self.label, "start", context.name))

    def on_stop(self, context) -> None:
        self.events.append((self.label, "stop", context.name))


class ErrorRecordingHandler(RecordingHandler):
    """RecordingHandler that also implements on_error."""

    def on_error(self, context) -> None:
        self.events.append((self.label, "error", context.name))


class FailingHandler(RecordingHandler):
    """Raises from the configured phases after recording them."""

    def __init__(self, label: str, events: list, fail_on: tuple[str, ...] = ("start",)):
        super().__init__(label, events)
        self.fail_on = fail_on

    def on_start(self, context) -> None:
        super().on_start(context)
        if "start" in self.fail_on:
            raise RuntimeError(f"{self.label} start failed")

    def on_stop(self, context) -> None:
        super().on_stop(context)
        if "stop" in self.fail_on:
            raise RuntimeError(f"{self.label} stop failed")


class ContextCapture:
    """Handler keeping every context it starts and stops."""

    def __init__(self):
        self.contexts = []
        self.stopped = []

    def supports_context(self, context):
        return True

    def on_start(self, context):
        self.contexts.append(context)

    def on_stop(self, context):
        self.stopped.append(context)
