from __future__ import annotations

from ikuai_exporter.client.ikuai import SUCCESS_MESSAGE
from ikuai_exporter.client.models import Envelope


def response_failed(response: Envelope | None, error: BaseException | None) -> bool:
    """True when a query raised, returned nothing, or the appliance did not report Success."""
    if error is not None or response is None:
        return True
    if response.err_msg != SUCCESS_MESSAGE:
        return True
    return getattr(response, "data", None) is None


def describe_failure(response: Envelope | None, error: BaseException | None) -> str:
    if error is not None:
        return f"{type(error).__name__}: {error}"
    if response is None:
        return "no response"
    if response.err_msg != SUCCESS_MESSAGE:
        return f"Result={response.result} ErrMsg={response.err_msg!r}"
    return "response carried no data"
