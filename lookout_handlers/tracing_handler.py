"""OpenTelemetry tracing handler.

One span per observation, named after the contextual name (falling back to the
observation name). The span is stored on the context so child observations can
parent their spans on it, and is made current while the observation runs so
OpenTelemetry-instrumented calls nest under it.
"""

from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode, Tracer

from lookout_core.context import ObservationContext

SPAN_KEY = "lookout.tracing.span"
TOKEN_KEY = "lookout.tracing.token"


class TracingObservationHandler:
    """Opens a span on start and ends it on stop or error."""

    def __init__(self, tracer: Tracer | None = None):
        self.tracer = tracer or trace.get_tracer("lookout")

    def supports_context(self, context: ObservationContext) -> bool:
        return True

    def on_start(self, context: ObservationContext) -> None:
        parent_context = None
        if context.parent is not None:
            parent_span = context.parent.get(SPAN_KEY)
            if parent_span is not None:
                parent_context = trace.set_span_in_context(parent_span)

        span = self.tracer.start_span(
            context.contextual_name or context.name,
            context=parent_context,
        )
        span.set_attribute("lookout.observation", context.name)
        self._tag(span, context)
        context.put(SPAN_KEY, span)
        context.put(TOKEN_KEY, otel_context.attach(trace.set_span_in_context(span)))

    def on_stop(self, context: ObservationContext) -> None:
        span = self._close(context)
        if span is None:
            return
        # Tags may have been added while the observation ran
        self._tag(span, context)
        span.end()

    def on_error(self, context: ObservationContext) -> None:
        span = self._close(context)
        if span is None:
            return
        self._tag(span, context)
        if context.error is not None:
            span.record_exception(context.error)
            span.set_status(Status(StatusCode.ERROR, str(context.error)))
        else:
            span.set_status(Status(StatusCode.ERROR))
        span.end()

    def _close(self, context: ObservationContext) -> Span | None:
        token = context.remove(TOKEN_KEY)
        if token is not None:
            # Logs and continues if stopped from another execution context
            otel_context.detach(token)
        return context.remove(SPAN_KEY)

    def _tag(self, span: Span, context: ObservationContext) -> None:
        if context.contextual_name:
            span.update_name(context.contextual_name)
        # First value wins for duplicate keys
        for key_value in reversed(context.all_tags):
            span.set_attribute(key_value.key, key_value.value)
