# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

import logging
from collections.abc import Sequence
from typing import Optional

from .backend_api import DirectoryInterface

logger = logging.getLogger(__name__)


async def get_healthy_servers(
    directory: DirectoryInterface, server_names: Optional[Sequence[str]] = None
) -> list[str]:
    """
    Return the servers eligible for aggregation, in candidate order.

    When ``server_names`` is given it is used as the candidate set and the
    directory is not asked to enumerate servers; health is still checked.
    Servers missing from the health snapshot, or reporting any status other
    than ``ok``, are excluded.
    """
    if server_names is None:
        candidates = await directory.list_servers()
    else:
        candidates = list(server_names)

    health = await directory.get_health()

    healthy = []
    for name in candidates:
        entry = health.get(name)
        if entry is not None and entry.is_ok:
            healthy.append(name)
        else:
            status = entry.status if entry is not None else "missing"
            logger.debug(f"Skipping server '{name}' (health: {status})")
    return healthy
