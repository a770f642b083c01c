"""Request/response messages exchanged with the coordinator."""

from typing import Annotated, Literal, Union

from pydantic import Field

from leakscope.models.base import BaseSchema
from leakscope.models.page import PageSnapshot
from leakscope.models.report import ScanReport
from leakscope.models.scan import ScanResult


class RequestScanResults(BaseSchema):
    """Ask for the passive network results collected for a session."""

    kind: Literal["RequestScanResults"] = "RequestScanResults"
    session_id: str


class ClearScanResults(BaseSchema):
    kind: Literal["ClearScanResults"] = "ClearScanResults"
    session_id: str


class StartPassiveObservation(BaseSchema):
    kind: Literal["StartPassiveObservation"] = "StartPassiveObservation"
    session_id: str


class StopPassiveObservation(BaseSchema):
    kind: Literal["StopPassiveObservation"] = "StopPassiveObservation"
    session_id: str | None = None


class FetchRawResponseBody(BaseSchema):
    kind: Literal["FetchRawResponseBody"] = "FetchRawResponseBody"
    session_id: str
    request_id: str


class ReportScanResults(BaseSchema):
    """Page-side scan pass handed to the coordinator."""

    kind: Literal["ReportScanResults"] = "ReportScanResults"
    session_id: str
    url: str
    result: ScanResult


class RequestPageRescan(BaseSchema):
    kind: Literal["RequestPageRescan"] = "RequestPageRescan"
    session_id: str
    snapshot: PageSnapshot


class RequestPageResults(BaseSchema):
    """Ask for the latest merged report of a session."""

    kind: Literal["RequestPageResults"] = "RequestPageResults"
    session_id: str


Message = Annotated[
    Union[
        RequestScanResults,
        ClearScanResults,
        StartPassiveObservation,
        StopPassiveObservation,
        FetchRawResponseBody,
        ReportScanResults,
        RequestPageRescan,
        RequestPageResults,
    ],
    Field(discriminator="kind"),
]


class MessageResponse(BaseSchema):
    """Exactly one response per request."""

    kind: str
    session_id: str | None = None
    ok: bool = True
    result: ScanResult | None = None
    report: ScanReport | None = None
    body: str | None = None
    error: str | None = None
