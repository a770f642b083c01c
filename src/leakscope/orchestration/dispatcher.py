"""Message dispatch between page-side clients and the coordinator."""

from typing import Any

from pydantic import TypeAdapter, ValidationError

from leakscope.core.exceptions import LeakscopeError
from leakscope.core.logging import get_logger
from leakscope.models.messages import (
    ClearScanResults,
    FetchRawResponseBody,
    Message,
    MessageResponse,
    ReportScanResults,
    RequestPageRescan,
    RequestPageResults,
    RequestScanResults,
    StartPassiveObservation,
    StopPassiveObservation,
)
from leakscope.orchestration.coordinator import ScanCoordinator

logger = get_logger("dispatcher")

_message_adapter: TypeAdapter[Message] = TypeAdapter(Message)


class MessageDispatcher:
    """Routes each request to the coordinator and returns exactly one response."""

    def __init__(self, coordinator: ScanCoordinator) -> None:
        self.coordinator = coordinator

    async def handle(self, message: Message | dict[str, Any]) -> MessageResponse:
        if isinstance(message, dict):
            try:
                message = _message_adapter.validate_python(message)
            except ValidationError as e:
                logger.warning("message_invalid", kind=message.get("kind"), errors=e.error_count())
                return MessageResponse(
                    kind=str(message.get("kind", "unknown")),
                    ok=False,
                    error=f"invalid message: {e.error_count()} error(s)",
                )

        try:
            return await self._dispatch(message)
        except LeakscopeError as e:
            logger.warning("message_failed", kind=message.kind, error=e.message)
            return MessageResponse(
                kind=message.kind,
                session_id=getattr(message, "session_id", None),
                ok=False,
                error=e.message,
            )

    async def _dispatch(self, message: Message) -> MessageResponse:
        coordinator = self.coordinator
        response = MessageResponse(kind=message.kind, session_id=message.session_id)

        if isinstance(message, RequestScanResults):
            response.result = coordinator.network_result(message.session_id)
        elif isinstance(message, ClearScanResults):
            coordinator.clear(message.session_id)
        elif isinstance(message, StartPassiveObservation):
            if coordinator.observer is None:
                return self._no_monitor(response)
            await coordinator.observer.start(message.session_id)
        elif isinstance(message, StopPassiveObservation):
            if coordinator.observer is None:
                return self._no_monitor(response)
            await coordinator.observer.stop(message.session_id)
        elif isinstance(message, FetchRawResponseBody):
            if coordinator.observer is None:
                return self._no_monitor(response)
            response.body = await coordinator.observer.fetch_body(
                message.session_id, message.request_id
            )
        elif isinstance(message, ReportScanResults):
            response.report = coordinator.ingest_page_result(
                message.session_id, message.url, message.result
            )
        elif isinstance(message, RequestPageRescan):
            response.report = await coordinator.run_scan(message.session_id, message.snapshot)
        elif isinstance(message, RequestPageResults):
            response.report = coordinator.latest_report(message.session_id)
        return response

    @staticmethod
    def _no_monitor(response: MessageResponse) -> MessageResponse:
        response.ok = False
        response.error = "no traffic monitor configured"
        return response
