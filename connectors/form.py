"""
Connector creation form state.

The "submit disabled until valid" behaviour of the create form is modelled
as a pure function of the form state so it can be tested without a browser.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from connectors.schedule import to_cron
from connectors.schemas import ConnectorCreate


@dataclass
class ConnectorFormState:
    name: str = ""
    collection_ids: List[str] = field(default_factory=list)
    hour: Optional[int] = 0
    minute: Optional[int] = 0
    timezone: Optional[str] = "UTC"

    @classmethod
    def from_form(cls, data: Mapping[str, object]) -> "ConnectorFormState":
        """
        Build state from submitted form fields.

        ``data`` is a ``starlette`` ``FormData`` or a plain mapping; repeated
        ``collection_ids`` keys are collected through ``getlist`` when present.
        """
        if hasattr(data, "getlist"):
            collection_ids = [str(v) for v in data.getlist("collection_ids") if v]
        else:
            raw = data.get("collection_ids") or []
            collection_ids = [raw] if isinstance(raw, str) else [str(v) for v in raw]

        return cls(
            name=str(data.get("name") or ""),
            collection_ids=collection_ids,
            hour=_optional_int(data.get("hour")),
            minute=_optional_int(data.get("minute")),
            timezone=(str(data["timezone"]) if data.get("timezone") else None),
        )


def _optional_int(value: object) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def is_form_valid(state: ConnectorFormState) -> bool:
    """True iff the create button may be enabled."""
    return (
        bool(state.name.strip())
        and len(state.collection_ids) > 0
        and state.hour is not None
        and state.minute is not None
        and state.timezone is not None
    )


def build_create_request(
    state: ConnectorFormState,
    provider: str,
    access_token: str,
) -> ConnectorCreate:
    """Convert valid form state into a ``connectors.create`` payload."""
    if not is_form_valid(state):
        raise ValueError("connector form is incomplete")
    return ConnectorCreate(
        provider=provider,
        name=state.name,
        collection_ids=state.collection_ids,
        cron_job=to_cron(state.hour, state.minute),
        cron_job_timezone=state.timezone,
        access_token=access_token,
    )
