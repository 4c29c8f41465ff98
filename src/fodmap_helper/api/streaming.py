"""Newline-delimited JSON encoding for chat deltas."""

from collections.abc import AsyncIterator

from fodmap_helper.api.models import DeltaPayload
from fodmap_helper.domain.chat import ProtocolDelta

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def encode_delta(delta: ProtocolDelta) -> bytes:
    """Serialize one delta as a single JSON line."""
    payload = DeltaPayload.from_delta(delta)
    line = payload.model_dump_json(by_alias=True, exclude_none=True)
    return (line + "\n").encode("utf-8")


async def ndjson_stream(deltas: AsyncIterator[ProtocolDelta]) -> AsyncIterator[bytes]:
    """Encode deltas one at a time, in emission order."""
    async for delta in deltas:
        yield encode_delta(delta)
