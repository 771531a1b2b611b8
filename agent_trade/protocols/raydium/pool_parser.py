"""
Raydium pool list parser

Decodes the `/pools/info/list` response into PoolPage. One malformed record
fails the whole page; the caller skips that page and tries again next cycle.
"""

import json
from typing import Any, Dict, List, Union

from ...errors import ParseError
from ...types.pool import PoolPage, PoolRecord


def parse_pool_record(data: Dict[str, Any]) -> PoolRecord:
    """
    Parse one pool object

    Raises:
        ParseError: Missing field or wrong type
    """
    record_id = data.get("id") if isinstance(data, dict) else None
    try:
        return PoolRecord.from_dict(data)
    except KeyError as e:
        raise ParseError.malformed_record(record_id, f"missing field {e}", e)
    except (TypeError, ValueError) as e:
        raise ParseError.malformed_record(record_id, str(e), e)


def parse_pool_records(items: List[Any]) -> List[PoolRecord]:
    """Parse a list of pool objects (API page body or persisted snapshot)"""
    if not isinstance(items, list):
        raise ParseError(f"Expected a list of pool records, got {type(items).__name__}")
    return [parse_pool_record(item) for item in items]


def parse_pool_page(payload: Union[Dict[str, Any], str, bytes]) -> PoolPage:
    """
    Parse a full API response

    Layout:
        {"id": str, "success": bool,
         "data": {"count": int, "data": [pool, ...], "hasNextPage": bool}}

    Raises:
        ParseError: Envelope or any record is malformed
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise ParseError(f"Response is not valid JSON: {e}", original_error=e)

    if not isinstance(payload, dict):
        raise ParseError(f"Response must be an object, got {type(payload).__name__}")

    try:
        success = payload["success"]
        body = payload["data"]
        count = body["count"]
        items = body["data"]
        has_next_page = body.get("hasNextPage", False)
    except (KeyError, TypeError) as e:
        raise ParseError(f"Malformed response envelope: {e}", original_error=e)

    return PoolPage(
        success=bool(success),
        count=int(count),
        has_next_page=bool(has_next_page),
        records=parse_pool_records(items),
    )
