# src/coopledger/domain/interfaces/gateways/actor_directory.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Actor/role resolution gateway protocol.

Purpose:
    Resolve the lifecycle roles an actor holds with respect to one
    cooperative. Identity, tokens, and tenant membership live outside this
    package; implementations adapt whatever user directory the host
    application uses.

Layer:
    domain/interfaces/gateways
"""

from __future__ import annotations

from typing import Protocol

from coopledger.domain.enums.financial_report import ActorRole


class ActorDirectory(Protocol):
    """Protocol for actor role lookup."""

    async def roles_for(self, actor_id: int, *, cooperative_id: int) -> frozenset[ActorRole]:
        """Return the roles ``actor_id`` holds for ``cooperative_id``.

        An actor with no relevant role yields an empty set rather than an
        error.
        """
        ...
